from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List, Literal
from datetime import datetime
from enum import Enum

from bua.models.evidence import Evidence


class Role(str, Enum):
    student = "student"
    admin = "admin"

class CaseStatus(str, Enum):
    submitted = "Submitted"
    under_review = "Under Review"
    resolved = "Resolved"
    closed = "Closed"

class Category(str, Enum):
    academics = "Academics"
    bullying = "Bullying"
    facilities = "Facilities"
    policy = "Policy"
    other = "Other"

CATEGORY_VALUES = [c.value for c in Category]

# ---------------------------------------------------------------- users

class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str

class UserPublic(BaseModel):
    name: str
    email: EmailStr
    role: Role = Role.student
    created_at: datetime
    last_login: Optional[datetime] = None

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# ---------------------------------------------------------------- cases

class CaseMessage(BaseModel):
    id: str
    sender: Literal["Student", "Admin"]
    text: str
    timestamp: Optional[datetime] = None

class CaseIn(BaseModel):
    title: Optional[str] = Field(None, max_length=120)
    category: Category = Category.other
    description: str = Field(..., min_length=1, max_length=5000)
    evidence_url: Optional[str] = None
    evidence_type: Optional[str] = None

class CaseOut(BaseModel):
    id: str
    student_id: str
    title: str
    category: str
    description: str
    redacted_description: str
    status: CaseStatus
    history: List[CaseMessage] = []
    resolution_note: str = ""
    created_at: Optional[datetime] = None

class CaseUpdate(BaseModel):
    status: Optional[CaseStatus] = None
    message: Optional[str] = Field(None, max_length=2000)

# ---------------------------------------------------------------- journal

class CaseRecord(BaseModel):
    """Resolved case as seen by journal generation. Carries no student identity."""
    id: str
    category: str
    redacted_description: str = ""
    status: CaseStatus = CaseStatus.resolved
    created_at: Optional[datetime] = None
    evidence: List[Evidence] = []

class CaseStub(BaseModel):
    """The only case fields allowed to reach the summarization service."""
    id: str
    category: str
    redacted_description: str

    @classmethod
    def from_record(cls, record: CaseRecord) -> "CaseStub":
        return cls(
            id=record.id,
            category=record.category,
            redacted_description=record.redacted_description or "",
        )

class RecentJournalEntry(BaseModel):
    id: str
    content: str = ""
    related_case_ids: List[str] = []

class EvidenceSummaryItem(BaseModel):
    case_id: str
    evidence_count: int = 0
    evidence_types: List[str] = []

class JournalEntryCreate(BaseModel):
    title: str
    content: str
    related_case_ids: List[str]
    evidence_summary: List[EvidenceSummaryItem] = []

class JournalEntryOut(JournalEntryCreate):
    id: str
    published_at: Optional[datetime] = None

# ---------------------------------------------------------------- ai

class AdviceRequest(BaseModel):
    prompt: str

class AdviceResponse(BaseModel):
    text: str

class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str
    ts: Optional[datetime] = None

class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chat_id: Optional[str] = Field(None, alias="chatId")
    message: str = ""

class ChatResponse(BaseModel):
    chat_id: str
    reply: Optional[str] = None
    history: List[ChatTurn] = []

class ReportSummaryRequest(BaseModel):
    text: str

class ReportSummary(BaseModel):
    title: str = "Issue report"
    category: Category = Category.other
    key_facts: List[str] = []
    description: str = ""
