from datetime import datetime, timezone
from bua.db.firestore import get_db

USERS_COLL = "users"

def get_user(email: str) -> dict | None:
    doc = get_db().collection(USERS_COLL).document(email).get()
    return doc.to_dict() if doc.exists else None

def create_user(user: dict) -> None:
    get_db().collection(USERS_COLL).document(user["email"]).set(user)

def update_last_login(email: str) -> None:
    get_db().collection(USERS_COLL).document(email).update({"last_login": datetime.now(timezone.utc)})
