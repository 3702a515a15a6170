"""
News/journal generation from resolved cases.

Each run re-reads the most recent journal entries, prefers resolved cases
not covered by them, tops up with the newest cases when there are not
enough fresh ones, and refuses to publish text that is near-identical to
the previous entry for the very same case set.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Set, Tuple

from bua.core.config import Settings, settings as default_settings
from bua.models.schemas import (
    CaseRecord,
    CaseStub,
    EvidenceSummaryItem,
    JournalEntryCreate,
    RecentJournalEntry,
)
from bua.repositories import cases_repo, journal_repo
from bua.services.evidence import summarize_evidence

logger = logging.getLogger("bua.journal")
logger.setLevel(logging.INFO)

Summarizer = Callable[[List[CaseStub]], str]


# ==============================================================================
# Errors
# ==============================================================================

class GenerationErrorKind(str, Enum):
    no_eligible_cases = "no_eligible_cases"
    no_new_candidates = "no_new_candidates"
    duplicate_journal_content = "duplicate_journal_content"
    generation_failed = "generation_failed"


class JournalGenerationError(Exception):
    kind: GenerationErrorKind = GenerationErrorKind.generation_failed
    message = "Failed to generate news entry. Please try again."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class NoEligibleCases(JournalGenerationError):
    kind = GenerationErrorKind.no_eligible_cases
    message = "No resolved cases found to summarise."


class NoNewCandidates(JournalGenerationError):
    kind = GenerationErrorKind.no_new_candidates
    message = "No new cases to summarise for the news feed right now."


class DuplicateJournalContent(JournalGenerationError):
    kind = GenerationErrorKind.duplicate_journal_content
    message = (
        "Generated news looks too similar to the previous one for the same cases. "
        "Try again after new cases arrive."
    )

    def __init__(self, similarity: float, message: Optional[str] = None):
        super().__init__(message)
        self.similarity = similarity


# ==============================================================================
# Similarity
# ==============================================================================

def _normalise(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip()).lower()

def tokenize(text: str) -> Set[str]:
    return {t for t in re.split(r"\W+", _normalise(text)) if t}

def jaccard_similarity(a: str, b: str) -> float:
    """Token-set Jaccard similarity; two empty texts count as identical."""
    ta, tb = tokenize(a), tokenize(b)
    if not ta and not tb:
        return 1.0
    union = len(ta | tb)
    return len(ta & tb) / float(union) if union else 0.0

def same_case_set(a: Sequence[str], b: Sequence[str]) -> bool:
    return len(a) == len(b) and set(a) == set(b)


# ==============================================================================
# Selection
# ==============================================================================

def select_candidates(
    pool: Sequence[CaseRecord],
    recent: Iterable[RecentJournalEntry],
    max_cases: int,
) -> List[CaseRecord]:
    """
    Pick up to `max_cases` cases from `pool` (newest first).

    Cases referenced by any of the `recent` entries are skipped while enough
    others exist; otherwise the newest remaining cases are used regardless.
    """
    used_recently = {cid for entry in recent for cid in entry.related_case_ids}
    picked = [c for c in pool if c.id not in used_recently][:max_cases]

    if len(picked) < max_cases:
        picked_ids = {c.id for c in picked}
        for c in pool:
            if len(picked) >= max_cases:
                break
            if c.id not in picked_ids:
                picked.append(c)
                picked_ids.add(c.id)
    return picked

def journal_title(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"News Update - {now:%d %b %Y}"

def _evidence_summary(cases: Iterable[CaseRecord]) -> List[EvidenceSummaryItem]:
    out = []
    for c in cases:
        count, types = summarize_evidence(c.evidence)
        out.append(EvidenceSummaryItem(case_id=c.id, evidence_count=count, evidence_types=types))
    return out


# ==============================================================================
# Composition
# ==============================================================================

def compose_journal_entry(
    pool: Sequence[CaseRecord],
    recent: Sequence[RecentJournalEntry],
    summarize: Summarizer,
    *,
    max_cases: int = 2,
    similarity_threshold: float = 0.98,
    now: Optional[datetime] = None,
) -> JournalEntryCreate:
    """
    Build the next journal entry without touching storage.

    `recent` is newest first; its first element is the entry the duplicate
    guard compares against. Raises `NoEligibleCases`, `NoNewCandidates` or
    `DuplicateJournalContent`; errors from `summarize` propagate unchanged.
    """
    if not pool:
        raise NoEligibleCases()

    picked = select_candidates(pool, recent, max_cases)
    if not picked:
        raise NoNewCandidates()

    picked_ids = [c.id for c in picked]
    last = recent[0] if recent else None
    same_as_last = last is not None and same_case_set(last.related_case_ids, picked_ids)

    content = summarize([CaseStub.from_record(c) for c in picked])

    if same_as_last:
        sim = jaccard_similarity(content, last.content)
        if sim >= similarity_threshold:
            logger.info("Rejected journal text for repeated cases %s (similarity=%.3f)", picked_ids, sim)
            raise DuplicateJournalContent(similarity=sim)

    return JournalEntryCreate(
        title=journal_title(now),
        content=content,
        related_case_ids=picked_ids,
        evidence_summary=_evidence_summary(picked),
    )


def generate_journal_entry(
    summarize: Summarizer,
    cfg: Settings = default_settings,
) -> Tuple[str, JournalEntryCreate]:
    """Read the recent window and the resolved pool, compose, persist one entry."""
    recent = journal_repo.list_recent_entries(cfg.JOURNAL_RECENT_WINDOW)
    pool = cases_repo.list_resolved_cases(cfg.JOURNAL_CASE_FETCH_LIMIT)

    entry = compose_journal_entry(
        pool,
        recent,
        summarize,
        max_cases=cfg.JOURNAL_MAX_CASES,
        similarity_threshold=cfg.JOURNAL_SIMILARITY_THRESHOLD,
    )
    entry_id = journal_repo.add_entry(entry)
    logger.info("Journal entry %s published for cases %s", entry_id, entry.related_case_ids)
    return entry_id, entry
