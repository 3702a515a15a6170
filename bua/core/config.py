from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "development"
    SECRET_KEY: str = ""
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    ALGORITHM: str = "HS256"

    CORS_ORIGINS: List[str] = []

    # accounts granted the admin role on sign-up; everyone else is a student
    ADMIN_EMAILS: List[str] = []

    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None
    FIREBASE_KEY_B64: Optional[str] = None
    GOOGLE_CLOUD_PROJECT: Optional[str] = None

    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.2
    OPENAI_MAX_TOKENS: int = 700

    # Journal generation tunables
    JOURNAL_MAX_CASES: int = Field(2, ge=1)
    JOURNAL_RECENT_WINDOW: int = Field(2, ge=1)
    JOURNAL_CASE_FETCH_LIMIT: int = Field(50, ge=1)
    JOURNAL_SIMILARITY_THRESHOLD: float = Field(0.98, ge=0.0, le=1.0)

settings = Settings()
