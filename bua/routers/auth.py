from fastapi import APIRouter, Depends, Body, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from firebase_admin import auth as firebase_auth
from bua.db.firestore import init_firebase
from bua.models.schemas import Token, UserCreate
from bua.services.auth_service import register_user, login_user, social_login_from_claims

router = APIRouter(prefix="/api/auth", tags=["Auth"])

@router.post("/register", response_model=Token)
def register(payload: UserCreate):
    token = register_user(payload.name, payload.email, payload.password)
    return {"access_token": token, "token_type": "bearer"}

@router.post("/login", response_model=Token)
def login(form: OAuth2PasswordRequestForm = Depends()):
    token = login_user(form.username, form.password)
    return {"access_token": token, "token_type": "bearer"}

@router.post("/firebase", response_model=Token)
def firebase_exchange(token: str = Body(..., embed=True)):
    """Exchange a Firebase ID token (Google/GitHub sign-in on the client) for an API token."""
    init_firebase()
    try:
        decoded = firebase_auth.verify_id_token(token)
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid token")
    access = social_login_from_claims(decoded.get("email"), decoded.get("name"))
    return {"access_token": access, "token_type": "bearer"}
