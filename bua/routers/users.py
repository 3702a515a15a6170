# bua/routers/users.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from bua.core.security import decode_token
from bua.repositories.users_repo import get_user
from bua.models.schemas import Role, UserPublic

router = APIRouter(prefix="/api/users", tags=["Users"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

def get_current_user(token: str = Depends(oauth2_scheme)) -> UserPublic:
    try:
        payload = decode_token(token)  # {"sub": email, "role": ..., "exp": ...}
        email = payload.get("sub")
        if not email:
            raise ValueError("No subject in token")
        data = get_user(email)
        if not data or not data.get("is_active", True):
            raise ValueError("User not found")
        return UserPublic(
            name=data["name"],
            email=data["email"],
            role=data.get("role", Role.student.value),
            created_at=data["created_at"],
            last_login=data.get("last_login"),
        )
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

def require_admin(current_user: UserPublic = Depends(get_current_user)) -> UserPublic:
    if current_user.role != Role.admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admins only")
    return current_user

@router.get("/me", response_model=UserPublic)
def read_me(current_user: UserPublic = Depends(get_current_user)):
    return current_user
