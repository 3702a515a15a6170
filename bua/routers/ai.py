# bua/routers/ai.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from bua.models.schemas import (
    AdviceRequest,
    AdviceResponse,
    ChatRequest,
    ChatResponse,
    ReportSummary,
    ReportSummaryRequest,
    UserPublic,
)
from bua.repositories import chats_repo
from bua.routers.users import get_current_user
from bua.services.ai_service import (
    chat_reply,
    get_advisor_response,
    handle_openai_error,
    summarise_for_report,
)

router = APIRouter(prefix="/api/ai", tags=["AI"])

logger = logging.getLogger("bua.ai")
logger.setLevel(logging.INFO)

MAX_PROMPT_CHARS = 2000


@router.post("/advice", response_model=AdviceResponse)
def advice(payload: AdviceRequest, _: UserPublic = Depends(get_current_user)):
    prompt = (payload.prompt or "").strip()
    if len(prompt) < 2:
        raise HTTPException(400, "Prompt is empty")
    if len(prompt) > MAX_PROMPT_CHARS:
        raise HTTPException(400, "Prompt too long")
    try:
        text = get_advisor_response(prompt)
    except Exception as e:
        logger.exception("Advisor error: %s", e)
        raise HTTPException(500, handle_openai_error(e))
    return {"text": text}


@router.post("/chat", response_model=ChatResponse)
def chat(payload: ChatRequest, current_user: UserPublic = Depends(get_current_user)):
    message = (payload.message or "").strip()
    if not message and not payload.chat_id:
        raise HTTPException(400, "message is required")
    if len(message) > MAX_PROMPT_CHARS:
        raise HTTPException(400, "Prompt too long")

    if payload.chat_id:
        data = chats_repo.get_chat(payload.chat_id)
        if data is None:
            raise HTTPException(404, "Chat not found")
        if data.get("ownerEmail") != current_user.email:
            raise HTTPException(403, "Not your chat")
        history = [t.model_dump() for t in chats_repo.history_from_doc(data.get("history"))]
        if not message:
            # no new turn, hand back what is stored
            return ChatResponse(chat_id=payload.chat_id, history=history)
        chat_id = payload.chat_id
        history.append({"role": "user", "text": message, "ts": datetime.now(timezone.utc)})
        chats_repo.save_history(chat_id, history)
    else:
        history = [{"role": "user", "text": message, "ts": datetime.now(timezone.utc)}]
        chat_id = chats_repo.create_chat(current_user.email, history)

    try:
        reply = chat_reply(history)
    except Exception as e:
        logger.exception("Chat error: %s", e)
        raise HTTPException(500, handle_openai_error(e))

    history.append({"role": "model", "text": reply, "ts": datetime.now(timezone.utc)})
    chats_repo.save_history(chat_id, history)
    return ChatResponse(chat_id=chat_id, reply=reply, history=history)


@router.post("/summarise", response_model=ReportSummary)
def summarise(payload: ReportSummaryRequest, _: UserPublic = Depends(get_current_user)):
    text = (payload.text or "").strip()
    if not text:
        raise HTTPException(400, "text is required")
    try:
        return summarise_for_report(text)
    except ValueError as e:
        logger.warning("Report summary rejected: %s", e)
        raise HTTPException(502, "AI did not return valid JSON")
    except Exception as e:
        logger.exception("Report summary error: %s", e)
        raise HTTPException(500, handle_openai_error(e))
