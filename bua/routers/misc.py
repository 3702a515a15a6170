from fastapi import APIRouter

router = APIRouter(tags=["Misc"])

@router.get("/")
def root():
    return {"message": "Bua API"}

@router.get("/health")
def health():
    return {"status": "ok"}
