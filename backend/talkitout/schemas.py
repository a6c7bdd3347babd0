# talkitout/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    FlagStatus,
    MAX_MESSAGE_LENGTH,
    MAX_NOTE_LENGTH,
    MAX_TASK_TITLE_LENGTH,
    MOOD_MAX,
    MOOD_MIN,
    MessageRole,
    RiskTag,
    Sentiment,
    Severity,
    SessionType,
    TaskPriority,
    TaskStatus,
    UserRole,
)


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------
class ClassificationResult(BaseModel):
    """Sentiment + risk verdict for one user message. Immutable."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sentiment: Sentiment
    risk_tags: List[RiskTag] = Field(..., alias="riskTags")
    severity: Severity

    @field_validator("risk_tags")
    @classmethod
    def _dedupe(cls, v: List[RiskTag]) -> List[RiskTag]:
        return list(dict.fromkeys(v))

    @classmethod
    def safe_default(cls) -> "ClassificationResult":
        return cls(sentiment=Sentiment.NEUTRAL, risk_tags=[], severity=Severity.LOW)


# -----------------------------------------------------------------------------
# Chat
# -----------------------------------------------------------------------------
class ChatRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)


class MessageOut(ORMModel):
    id: int
    role: MessageRole
    text: str
    sentiment: Optional[Sentiment] = None
    risk_tags: List[RiskTag] = Field(default_factory=list)
    severity: Optional[Severity] = None
    created_at: datetime


class ChatResponse(BaseModel):
    user_message: MessageOut
    ai_message: MessageOut
    flagged: bool = False


class HistoryResponse(BaseModel):
    messages: List[MessageOut]


# -----------------------------------------------------------------------------
# Risk flags
# -----------------------------------------------------------------------------
class RiskFlagOut(ORMModel):
    id: int
    user_id: int
    message_id: int
    tags: List[RiskTag]
    severity: Severity
    status: FlagStatus
    reviewed_by: Optional[int] = None
    notes: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime


class RiskFlagUpdate(BaseModel):
    status: Optional[FlagStatus] = None
    notes: Optional[str] = Field(None, max_length=MAX_NOTE_LENGTH)


class RiskFlagDetail(BaseModel):
    flag: RiskFlagOut
    context: List[MessageOut]


class OverrelianceOut(BaseModel):
    user_id: int
    overreliance: bool


# -----------------------------------------------------------------------------
# Check-ins
# -----------------------------------------------------------------------------
class CheckInIn(BaseModel):
    mood: int = Field(..., ge=MOOD_MIN, le=MOOD_MAX)
    note: Optional[str] = Field(None, max_length=MAX_NOTE_LENGTH)


class CheckInOut(ORMModel):
    id: int
    mood: int
    note: Optional[str] = None
    sentiment: Optional[Sentiment] = None
    created_at: datetime


class CheckInStats(BaseModel):
    total_check_ins: int
    recent_check_ins: int
    average_mood: float
    current_streak: int


# -----------------------------------------------------------------------------
# Tasks
# -----------------------------------------------------------------------------
class TaskIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=MAX_TASK_TITLE_LENGTH)
    subject: Optional[str] = None
    due_at: Optional[datetime] = None
    priority: TaskPriority = TaskPriority.MED

    @field_validator("subject", "due_at", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        return None if v == "" else v


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=MAX_TASK_TITLE_LENGTH)
    subject: Optional[str] = None
    due_at: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None


class TaskStatusIn(BaseModel):
    status: TaskStatus


class TaskOut(ORMModel):
    id: int
    title: str
    subject: Optional[str] = None
    due_at: Optional[datetime] = None
    priority: TaskPriority
    status: TaskStatus
    created_at: datetime


# -----------------------------------------------------------------------------
# Pomodoro
# -----------------------------------------------------------------------------
class PomodoroStop(BaseModel):
    cycles_completed: int = Field(0, ge=0)


class FocusSessionOut(ORMModel):
    id: int
    type: SessionType
    started_at: datetime
    ended_at: Optional[datetime] = None
    cycles_completed: int


class PomodoroPreferences(BaseModel):
    focus_duration: Optional[int] = Field(None, ge=5, le=60)
    break_duration: Optional[int] = Field(None, ge=1, le=30)
    long_break_duration: Optional[int] = Field(None, ge=5, le=60)
    cycles_before_long_break: Optional[int] = Field(None, ge=2, le=10)


class PomodoroState(BaseModel):
    active_session: Optional[FocusSessionOut] = None
    preferences: Dict[str, int]


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------
class UserOut(ORMModel):
    id: int
    name: str
    email: str
    role: UserRole
    age: Optional[int] = None
    school: Optional[str] = None
    created_at: datetime


class Preferences(BaseModel):
    pomodoro: Optional[PomodoroPreferences] = None
    notifications: Optional[bool] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    school: Optional[str] = None
    preferences: Optional[Preferences] = None


class ProfileOut(BaseModel):
    user: UserOut
    preferences: Dict[str, Any]
    streaks: Dict[str, int]


# -----------------------------------------------------------------------------
# Privacy
# -----------------------------------------------------------------------------
class DeleteConfirmation(BaseModel):
    confirmation: str
