"""
Tests for the generative-AI helpers (model calls are mocked).
"""
import json
from unittest.mock import MagicMock, patch

import pytest

from bua.models.schemas import CaseStub
from bua.services import ai_service
from bua.services.ai_service import (
    ADVISOR_SYSTEM,
    REDACTION_FAILED_TEXT,
    chat_reply,
    coerce_report_summary,
    extract_json_block,
    get_journal_summarizer,
    handle_openai_error,
    redact_pii,
    summarise_cases_for_journal,
    summarise_for_report,
    template_journal_summary,
)


def _stubs(*specs):
    return [CaseStub(id=i, category=c, redacted_description=t) for i, c, t in specs]


def _fake_client(reply):
    client = MagicMock()
    client.chat.completions.create.return_value.choices = [MagicMock(message=MagicMock(content=reply))]
    return client


class TestExtractJson:

    def test_embedded_object(self):
        assert extract_json_block('Sure! {"title": "Locker"} done') == {"title": "Locker"}

    def test_no_object(self):
        assert extract_json_block("no json here") is None

    def test_invalid_object(self):
        assert extract_json_block("{not: valid}") is None


class TestCoerceReportSummary:

    def test_unknown_category_becomes_other(self):
        s = coerce_report_summary({"title": "T", "category": "Cafeteria"}, "raw")
        assert s.category.value == "Other"

    def test_defaults(self):
        s = coerce_report_summary({"keyFacts": "not a list"}, "the raw text")
        assert s.title == "Issue report"
        assert s.key_facts == []
        assert s.description == "the raw text"

    def test_valid(self):
        s = coerce_report_summary(
            {"title": "Broken locker", "category": "Facilities", "keyFacts": ["West wing"], "description": "D"},
            "raw",
        )
        assert (s.title, s.category.value, s.key_facts, s.description) == ("Broken locker", "Facilities", ["West wing"], "D")


class TestModelCalls:

    def test_summarise_for_report(self):
        reply = 'Here: {"title": "Grades", "category": "Academics", "keyFacts": ["a"], "description": "d"}'
        with patch.object(ai_service, "oai_client", return_value=_fake_client(reply)):
            assert summarise_for_report("my grade").category.value == "Academics"

    def test_summarise_for_report_without_json(self):
        with patch.object(ai_service, "oai_client", return_value=_fake_client("sorry")):
            with pytest.raises(ValueError):
                summarise_for_report("my grade")

    def test_redact_pii_failure_never_returns_raw_text(self):
        with patch.object(ai_service, "oai_client", side_effect=RuntimeError("OpenAI not configured")):
            assert redact_pii("Sarah was hurt in Room 12") == REDACTION_FAILED_TEXT

    def test_redact_pii(self):
        with patch.object(ai_service, "oai_client", return_value=_fake_client("[REDACTED_STUDENT] was hurt")):
            assert redact_pii("Sarah was hurt") == "[REDACTED_STUDENT] was hurt"

    def test_journal_prompt_carries_only_stub_fields(self):
        client = _fake_client("Summary")
        with patch.object(ai_service, "oai_client", return_value=client):
            out = summarise_cases_for_journal(_stubs(("C1", "Bullying", "[REDACTED_STUDENT] harassed")))
        assert out == "Summary"
        user_msg = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        payload = json.loads(user_msg.split("\n", 1)[1])
        assert payload == [{"id": "C1", "category": "Bullying", "redactedDescription": "[REDACTED_STUDENT] harassed"}]

    def test_chat_reply_maps_roles(self):
        client = _fake_client(" Tell the office. ")
        history = [
            {"role": "user", "text": "My bag was taken"},
            {"role": "model", "text": "Have you told a teacher?"},
            {"role": "user", "text": "Yes"},
        ]
        with patch.object(ai_service, "oai_client", return_value=client):
            assert chat_reply(history) == "Tell the office."
        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": ADVISOR_SYSTEM}
        assert [(m["role"], m["content"]) for m in messages[1:]] == [
            ("user", "My bag was taken"), ("assistant", "Have you told a teacher?"), ("user", "Yes"),
        ]

    def test_rate_limit_message(self):
        assert "rate limit" in handle_openai_error(Exception("Rate limit reached"))


class TestTemplateSummary:

    def test_deterministic_for_case_set(self):
        a = _stubs(("C1", "Facilities", "Broken locker"), ("C2", "Bullying", "Harassment at lunch"))
        b = list(reversed(a))
        assert template_journal_summary(a) == template_journal_summary(b)

    def test_mentions_categories_and_recommendations(self):
        text = template_journal_summary(_stubs(("C1", "Facilities", "Broken locker")))
        assert "Facilities (1 case)" in text
        assert text.count("•") == 2

    def test_multi_category(self):
        text = template_journal_summary(_stubs(
            ("C1", "Facilities", "x"), ("C2", "Bullying", "y"), ("C3", "Policy", "z"), ("C4", "Academics", "w"),
        ))
        assert "bullying (1), facilities (1)" in text
        assert text.count("•") == 3

    def test_truncates_long_snippets(self):
        text = template_journal_summary(_stubs(("C1", "Other", "word " * 100)))
        assert "…" in text


def test_summarizer_falls_back_without_key(monkeypatch):
    monkeypatch.setattr(ai_service.settings, "OPENAI_API_KEY", "")
    assert get_journal_summarizer() is template_journal_summary
    monkeypatch.setattr(ai_service.settings, "OPENAI_API_KEY", "sk-test")
    assert get_journal_summarizer() is summarise_cases_for_journal
