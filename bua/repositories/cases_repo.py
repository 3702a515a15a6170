from typing import Any, Dict, List, Optional
from google.cloud import firestore

from bua.db.firestore import get_db
from bua.models.schemas import CaseOut, CaseRecord, CaseStatus, CaseMessage
from bua.services.evidence import evidence_from_fields

CASES_COLL = "cases"


def _status(value: Any) -> CaseStatus:
    try:
        return CaseStatus(value)
    except ValueError:
        return CaseStatus.submitted

def _history(raw: Any) -> List[CaseMessage]:
    out = []
    for m in raw or []:
        if not isinstance(m, dict) or m.get("sender") not in ("Student", "Admin"):
            continue
        out.append(CaseMessage(
            id=str(m.get("id") or ""),
            sender=m["sender"],
            text=str(m.get("text") or ""),
            timestamp=m.get("timestamp"),
        ))
    return out

def case_out_from_doc(doc_id: str, data: Dict[str, Any]) -> CaseOut:
    return CaseOut(
        id=doc_id,
        student_id=str(data.get("studentId") or ""),
        title=data.get("title") or "Untitled",
        category=data.get("category") or "Other",
        description=data.get("description") or "",
        redacted_description=data.get("redactedDescription") or "",
        status=_status(data.get("status")),
        history=_history(data.get("history")),
        resolution_note=data.get("resolutionNote") or "",
        created_at=data.get("createdAt"),
    )

def case_record_from_doc(doc_id: str, data: Dict[str, Any]) -> CaseRecord:
    """Anonymised view of a case document; student id and raw text are dropped here."""
    redacted = data.get("redactedDescription")
    if redacted is None:
        redacted = "[REDACTED]" if data.get("description") else ""
    return CaseRecord(
        id=doc_id,
        category=data.get("category") or "General",
        redacted_description=str(redacted),
        status=_status(data.get("status") or CaseStatus.resolved.value),
        created_at=data.get("createdAt"),
        evidence=evidence_from_fields(data),
    )


def create_case(data: Dict[str, Any]) -> str:
    _, ref = get_db().collection(CASES_COLL).add(data)
    return ref.id

def get_case_data(case_id: str) -> Optional[Dict[str, Any]]:
    doc = get_db().collection(CASES_COLL).document(case_id).get()
    return (doc.to_dict() or {}) if doc.exists else None

def get_case(case_id: str) -> Optional[CaseOut]:
    data = get_case_data(case_id)
    return case_out_from_doc(case_id, data) if data is not None else None

def list_cases(status: Optional[CaseStatus] = None, limit: int = 100) -> List[CaseOut]:
    q = get_db().collection(CASES_COLL)
    if status:
        q = q.where("status", "==", status.value)
    q = q.order_by("createdAt", direction=firestore.Query.DESCENDING).limit(limit)
    return [case_out_from_doc(d.id, d.to_dict() or {}) for d in q.stream()]

def list_cases_for_student(email: str, limit: int = 100) -> List[CaseOut]:
    # equality filter only; sorting in Python avoids a composite index, so the
    # cap applies after sorting
    docs = get_db().collection(CASES_COLL).where("studentId", "==", email).stream()
    cases = [case_out_from_doc(d.id, d.to_dict() or {}) for d in docs]
    cases.sort(key=lambda c: c.created_at.timestamp() if c.created_at else 0.0, reverse=True)
    return cases[:limit]

def update_case(case_id: str, updates: Dict[str, Any]) -> None:
    get_db().collection(CASES_COLL).document(case_id).update(
        {**updates, "updatedAt": firestore.SERVER_TIMESTAMP}
    )

def list_resolved_cases(limit: int = 50) -> List[CaseRecord]:
    """Resolved cases, newest first, bounded by `limit`."""
    q = (
        get_db().collection(CASES_COLL)
        .where("status", "==", CaseStatus.resolved.value)
        .order_by("createdAt", direction=firestore.Query.DESCENDING)
        .limit(limit)
    )
    return [case_record_from_doc(d.id, d.to_dict() or {}) for d in q.stream()]
