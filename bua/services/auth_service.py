from fastapi import HTTPException, status
from datetime import datetime, timezone
from bua.core.config import settings
from bua.core.security import hash_password, verify_password, create_access_token
from bua.models.schemas import Role
from bua.repositories.users_repo import get_user, create_user, update_last_login

def role_for(email: str) -> Role:
    admins = {e.strip().lower() for e in settings.ADMIN_EMAILS}
    return Role.admin if email.strip().lower() in admins else Role.student

def register_user(name: str, email: str, password: str) -> str:
    if get_user(email):
        raise HTTPException(status_code=400, detail="Email already registered")
    role = role_for(email)
    user = {
        "name": name,
        "email": email,
        "role": role.value,
        "hashed_password": hash_password(password),
        "created_at": datetime.now(timezone.utc),
        "is_active": True,
    }
    create_user(user)
    return create_access_token(sub=email, role=role.value)

def login_user(email: str, password: str) -> str:
    user = get_user(email)
    if not user or not verify_password(password, user["hashed_password"]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    if not user.get("is_active", True):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")
    update_last_login(email)
    return create_access_token(sub=email, role=user.get("role", Role.student.value))

def social_login_from_claims(email: str, name: str | None) -> str:
    if not email:
        raise HTTPException(status_code=400, detail="Invalid token (no email)")
    user = get_user(email)
    if not user:
        user = {
            "name": name or email.split("@")[0],
            "email": email,
            "role": role_for(email).value,
            "hashed_password": hash_password("*" * 32),
            "created_at": datetime.now(timezone.utc),
            "is_active": True,
        }
        create_user(user)
    else:
        update_last_login(email)
    return create_access_token(sub=email, role=user.get("role", Role.student.value))
