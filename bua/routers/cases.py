# bua/routers/cases.py
import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status
from google.cloud import firestore

from bua.models.schemas import CaseIn, CaseOut, CaseStatus, CaseUpdate, Role, UserPublic
from bua.repositories import cases_repo
from bua.routers.users import get_current_user, require_admin
from bua.services.ai_service import redact_pii
from bua.services.evidence import sniff_evidence_type

router = APIRouter(prefix="/api/cases", tags=["Cases"])

logger = logging.getLogger("bua.cases")
logger.setLevel(logging.INFO)


def _msg_id() -> str:
    return f"msg{uuid4().hex[:12]}"

def _title_from(text: str) -> str:
    t = " ".join((text or "").split())
    return t[:90].strip() + "…" if len(t) > 90 else t


@router.post("", response_model=CaseOut, status_code=status.HTTP_201_CREATED)
def create_case(payload: CaseIn, current_user: UserPublic = Depends(get_current_user)):
    description = payload.description.strip()
    if not description:
        raise HTTPException(400, "Description cannot be empty.")

    redacted = redact_pii(description)
    now = datetime.now(timezone.utc)
    history = [{"id": _msg_id(), "sender": "Student", "text": "Case submitted.", "timestamp": now}]
    title = (payload.title or "").strip() or _title_from(description)

    data = {
        "studentId": current_user.email,
        "title": title,
        "category": payload.category.value,
        "description": description,
        "redactedDescription": redacted,
        "status": CaseStatus.submitted.value,
        "history": history,
        "createdAt": firestore.SERVER_TIMESTAMP,
        "resolutionNote": "",
    }
    if payload.evidence_url:
        data["evidenceUrl"] = payload.evidence_url
        data["evidenceType"] = payload.evidence_type or sniff_evidence_type(payload.evidence_url)

    case_id = cases_repo.create_case(data)
    logger.info("Case %s filed (%s)", case_id, payload.category.value)
    return cases_repo.case_out_from_doc(case_id, {**data, "createdAt": now})


@router.get("/mine", response_model=List[CaseOut])
def list_my_cases(current_user: UserPublic = Depends(get_current_user)):
    return cases_repo.list_cases_for_student(current_user.email)


@router.get("", response_model=List[CaseOut])
def list_all_cases(
    status_filter: Optional[CaseStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    _: UserPublic = Depends(require_admin),
):
    return cases_repo.list_cases(status_filter, limit)


@router.get("/{case_id}", response_model=CaseOut)
def get_case(case_id: str, current_user: UserPublic = Depends(get_current_user)):
    case = cases_repo.get_case(case_id)
    if case is None:
        raise HTTPException(404, "Case not found")
    if current_user.role != Role.admin and case.student_id != current_user.email:
        raise HTTPException(403, "Forbidden")
    return case


@router.patch("/{case_id}", response_model=CaseOut)
def update_case(case_id: str, payload: CaseUpdate, _: UserPublic = Depends(require_admin)):
    data = cases_repo.get_case_data(case_id)
    if data is None:
        raise HTTPException(404, "Case not found")

    message = (payload.message or "").strip()
    updates = {}
    if payload.status:
        updates["status"] = payload.status.value
    if message:
        history = list(data.get("history") or [])
        # SERVER_TIMESTAMP is not allowed inside arrays
        history.append({
            "id": _msg_id(),
            "sender": "Admin",
            "text": message,
            "timestamp": datetime.now(timezone.utc),
        })
        updates["history"] = history
    if payload.status == CaseStatus.resolved and not data.get("resolutionNote"):
        updates["resolutionNote"] = message

    if not updates:
        raise HTTPException(400, "Nothing to update")

    cases_repo.update_case(case_id, updates)
    logger.info("Case %s updated (%s)", case_id, ", ".join(sorted(updates)))
    return cases_repo.case_out_from_doc(case_id, {**data, **updates})
