import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from bua.core.config import settings
from bua.routers import auth, misc, users, cases, journal, ai

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

if not settings.SECRET_KEY:
    raise RuntimeError("SECRET_KEY is required")

app = FastAPI(title="Bua API")

origins = settings.CORS_ORIGINS or [
    "http://localhost:3000",
    "http://localhost:3001",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.include_router(misc.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(cases.router)
app.include_router(journal.router)
app.include_router(ai.router)
