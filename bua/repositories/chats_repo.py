from typing import Any, Dict, List, Optional
from google.cloud import firestore

from bua.db.firestore import get_db
from bua.models.schemas import ChatTurn

CHATS_COLL = "aiChats"


def history_from_doc(raw: Any) -> List[ChatTurn]:
    out = []
    for h in raw if isinstance(raw, list) else []:
        if not isinstance(h, dict) or h.get("role") not in ("user", "model"):
            continue
        out.append(ChatTurn(role=h["role"], text=str(h.get("text") or ""), ts=h.get("ts")))
    return out


def create_chat(owner_email: str, history: List[Dict[str, Any]]) -> str:
    ref = get_db().collection(CHATS_COLL).document()
    ref.set({
        "ownerEmail": owner_email,
        "createdAt": firestore.SERVER_TIMESTAMP,
        "updatedAt": firestore.SERVER_TIMESTAMP,
        "history": history,
    })
    return ref.id

def get_chat(chat_id: str) -> Optional[Dict[str, Any]]:
    doc = get_db().collection(CHATS_COLL).document(chat_id).get()
    return (doc.to_dict() or {}) if doc.exists else None

def save_history(chat_id: str, history: List[Dict[str, Any]]) -> None:
    # SERVER_TIMESTAMP is not allowed inside arrays; turns carry client datetimes
    get_db().collection(CHATS_COLL).document(chat_id).update(
        {"history": history, "updatedAt": firestore.SERVER_TIMESTAMP}
    )
