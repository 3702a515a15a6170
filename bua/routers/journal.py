# bua/routers/journal.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bua.core.config import settings
from bua.models.schemas import JournalEntryOut, UserPublic
from bua.repositories import journal_repo
from bua.routers.users import get_current_user, require_admin
from bua.services.ai_service import get_journal_summarizer
from bua.services.journal_service import (
    GenerationErrorKind,
    JournalGenerationError,
    Summarizer,
    generate_journal_entry,
)

router = APIRouter(prefix="/api/journal", tags=["Journal"])

logger = logging.getLogger("bua.journal")
logger.setLevel(logging.INFO)


def get_summarizer() -> Summarizer:
    return get_journal_summarizer()


@router.get("", response_model=List[JournalEntryOut])
def list_journal(
    limit: int = Query(50, ge=1, le=200),
    _: UserPublic = Depends(get_current_user),
):
    return journal_repo.list_entries(limit)


@router.post("/generate", response_model=JournalEntryOut, status_code=status.HTTP_201_CREATED)
def generate_journal(
    summarize: Summarizer = Depends(get_summarizer),
    admin: UserPublic = Depends(require_admin),
):
    try:
        entry_id, entry = generate_journal_entry(summarize, settings)
    except JournalGenerationError as e:
        logger.info("Journal generation by %s stopped: %s", admin.email, e.kind.value)
        raise HTTPException(status.HTTP_409_CONFLICT, {"code": e.kind.value, "message": e.message})
    except Exception as e:
        logger.exception("Error generating news entry: %s", e)
        raise HTTPException(
            status.HTTP_502_BAD_GATEWAY,
            {
                "code": GenerationErrorKind.generation_failed.value,
                "message": JournalGenerationError.message,
            },
        )
    return JournalEntryOut(id=entry_id, **entry.model_dump())
