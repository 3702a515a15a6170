"""
Pytest configuration and shared fixtures.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("OPENAI_API_KEY", "")

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from bua.models.schemas import CaseRecord, RecentJournalEntry, Role, UserPublic


BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_case():
    """Resolved CaseRecord factory; higher `age` means older."""
    def _create(case_id, category="Facilities", text=None, age=0, evidence=None):
        return CaseRecord(
            id=case_id,
            category=category,
            redacted_description=text if text is not None else f"Report {case_id} about lockers.",
            created_at=BASE_TIME - timedelta(days=age),
            evidence=evidence or [],
        )
    return _create


@pytest.fixture
def pool(make_case):
    """C5..C1, newest first."""
    return [make_case(f"C{i}", age=5 - i) for i in range(5, 0, -1)]


@pytest.fixture
def make_entry():
    def _create(ids, content="Previous news text.", entry_id="J1"):
        return RecentJournalEntry(id=entry_id, content=content, related_case_ids=list(ids))
    return _create


@pytest.fixture
def mock_firestore_doc():
    """Mock Firestore document snapshot."""
    def _create(doc_id, data):
        doc = Mock()
        doc.id = doc_id
        doc.exists = data is not None
        doc.to_dict.return_value = data
        return doc
    return _create


def _user(role):
    return UserPublic(
        name="Dr. Evans" if role == Role.admin else "Alex",
        email="admin@example.com" if role == Role.admin else "alex@example.com",
        role=role,
        created_at=BASE_TIME,
    )


@pytest.fixture
def admin_user():
    return _user(Role.admin)


@pytest.fixture
def student_user():
    return _user(Role.student)


@pytest.fixture
def app():
    from bua.main import app as fastapi_app
    fastapi_app.dependency_overrides.clear()
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def login_as(app):
    from bua.routers.users import get_current_user

    def _login(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return TestClient(app)
    return _login
