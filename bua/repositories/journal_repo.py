from typing import Any, Dict, List
from google.cloud import firestore

from bua.db.firestore import get_db
from bua.models.schemas import (
    EvidenceSummaryItem,
    JournalEntryCreate,
    JournalEntryOut,
    RecentJournalEntry,
)

JOURNAL_COLL = "journal"


def _ids(raw: Any) -> List[str]:
    return [str(x) for x in raw] if isinstance(raw, list) else []

def _count(raw: Any) -> int:
    return raw if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0 else 0

def _evidence_summary(raw: Any) -> List[EvidenceSummaryItem]:
    out = []
    for e in raw if isinstance(raw, list) else []:
        if not isinstance(e, dict) or not e.get("caseId"):
            continue
        out.append(EvidenceSummaryItem(
            case_id=str(e["caseId"]),
            evidence_count=_count(e.get("evidenceCount")),
            evidence_types=_ids(e.get("evidenceTypes")),
        ))
    return out

def _latest(limit: int):
    q = (
        get_db().collection(JOURNAL_COLL)
        .order_by("publishedAt", direction=firestore.Query.DESCENDING)
        .limit(limit)
    )
    return q.stream()


def list_recent_entries(k: int) -> List[RecentJournalEntry]:
    """The `k` most recently published entries, newest first."""
    out = []
    for d in _latest(k):
        data = d.to_dict() or {}
        out.append(RecentJournalEntry(
            id=d.id,
            content=str(data.get("content") or ""),
            related_case_ids=_ids(data.get("relatedCaseIds")),
        ))
    return out

def list_entries(limit: int = 50) -> List[JournalEntryOut]:
    out = []
    for d in _latest(limit):
        data = d.to_dict() or {}
        out.append(JournalEntryOut(
            id=d.id,
            title=data.get("title") or "News Update",
            content=str(data.get("content") or ""),
            related_case_ids=_ids(data.get("relatedCaseIds")),
            evidence_summary=_evidence_summary(data.get("evidenceSummary")),
            published_at=data.get("publishedAt"),
        ))
    return out

def to_document(entry: JournalEntryCreate) -> Dict[str, Any]:
    return {
        "title": entry.title,
        "content": entry.content,
        "relatedCaseIds": list(entry.related_case_ids),
        "evidenceSummary": [
            {"caseId": e.case_id, "evidenceCount": e.evidence_count, "evidenceTypes": list(e.evidence_types)}
            for e in entry.evidence_summary
        ],
        "publishedAt": firestore.SERVER_TIMESTAMP,
    }

def add_entry(entry: JournalEntryCreate) -> str:
    _, ref = get_db().collection(JOURNAL_COLL).add(to_document(entry))
    return ref.id
