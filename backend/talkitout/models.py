from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

from .constants import (
    FlagStatus,
    MessageRole,
    Sentiment,
    SessionType,
    TaskPriority,
    TaskStatus,
    UserRole,
)
from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum(cls, name: str):
    # store the enum *values* ("pos", "in_review", ...) rather than member names
    return SAEnum(cls, name=name, values_callable=lambda e: [m.value for m in e], native_enum=False)


class User(Base):
    """
    Student, counselor or admin account.
    Credentials live with the identity provider that issues our bearer tokens.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(_enum(UserRole, "user_role"), nullable=False, default=UserRole.STUDENT)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    age = Column(Integer, nullable=True)
    school = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    preferences = Column(JSON, nullable=False, default=dict)  # {"pomodoro": {...}, "notifications": bool}
    streaks = Column(JSON, nullable=False, default=dict)      # {"checkin": {"count": n, "last_date": iso}}
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="profile")


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(_enum(MessageRole, "message_role"), nullable=False)
    text = Column(Text, nullable=False)

    # classification (user turns only)
    sentiment = Column(_enum(Sentiment, "sentiment"), nullable=True)
    risk_tags = Column(JSON, nullable=False, default=list)
    severity = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (Index("ix_messages_user_created", "user_id", "created_at"),)


class RiskFlag(Base):
    __tablename__ = "risk_flags"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message_id = Column(Integer, ForeignKey("messages.id", ondelete="CASCADE"), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    severity = Column(Integer, nullable=False)  # frozen copy of the message severity
    status = Column(_enum(FlagStatus, "flag_status"), nullable=False, default=FlagStatus.OPEN)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    message = relationship("Message")

    __table_args__ = (
        Index("ix_risk_flags_user_status", "user_id", "status"),
        Index("ix_risk_flags_severity_created", "severity", "created_at"),
    )


class CheckIn(Base):
    __tablename__ = "check_ins"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mood = Column(Integer, nullable=False)  # 1..5
    note = Column(Text, nullable=True)
    sentiment = Column(_enum(Sentiment, "checkin_sentiment"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    subject = Column(String(100), nullable=True)
    due_at = Column(DateTime(timezone=True), nullable=True)
    priority = Column(_enum(TaskPriority, "task_priority"), nullable=False, default=TaskPriority.MED)
    status = Column(_enum(TaskStatus, "task_status"), nullable=False, default=TaskStatus.TODO)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class FocusSession(Base):
    __tablename__ = "focus_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(_enum(SessionType, "session_type"), nullable=False, default=SessionType.POMODORO)
    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    cycles_completed = Column(Integer, nullable=False, default=0)


class Audit(Base):
    __tablename__ = "audits"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, nullable=False, index=True)  # survives account erasure
    action = Column(String(64), nullable=False)
    entity = Column(String(64), nullable=False)
    entity_id = Column(Integer, nullable=True)
    meta = Column(JSON, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
