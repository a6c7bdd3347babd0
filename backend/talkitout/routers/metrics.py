# talkitout/routers/metrics.py
"""
Counselor dashboards. Everything here is a count or an average; no message
text leaves this module.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from ..agents.overreliance import detect_overreliance
from ..auth import require_staff
from ..constants import FlagStatus, MessageRole, Sentiment, Severity, TaskStatus, UserRole
from ..db import get_db
from ..errors import AppError
from ..models import CheckIn, FocusSession, Message, RiskFlag, Task, User

router = APIRouter(prefix="/metrics", tags=["metrics"])


def _since(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


def _focus_minutes(sessions) -> int:
    total = 0.0
    for s in sessions:
        if s.ended_at is not None:
            total += (s.ended_at - s.started_at).total_seconds() / 60
    return round(total)


@router.get("/aggregate")
def aggregate(
    days: int = Query(7, ge=1, le=365),
    staff: User = Depends(require_staff),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    since = _since(days)

    total_students = db.query(func.count(User.id)).filter(User.role == UserRole.STUDENT).scalar() or 0
    active_students = (
        db.query(func.count(distinct(Message.user_id)))
        .filter(Message.role == MessageRole.USER, Message.created_at >= since)
        .scalar()
        or 0
    )

    checkins, avg_mood = (
        db.query(func.count(CheckIn.id), func.avg(CheckIn.mood)).filter(CheckIn.created_at >= since).one()
    )

    focus_sessions, focus_cycles = (
        db.query(func.count(FocusSession.id), func.coalesce(func.sum(FocusSession.cycles_completed), 0))
        .filter(FocusSession.started_at >= since, FocusSession.ended_at.is_not(None))
        .one()
    )

    open_flags = db.query(func.count(RiskFlag.id)).filter(RiskFlag.status != FlagStatus.RESOLVED).scalar() or 0
    recent = (
        db.query(RiskFlag.severity, func.count(RiskFlag.id))
        .filter(RiskFlag.created_at >= since)
        .group_by(RiskFlag.severity)
        .all()
    )
    by_severity = {s.name.lower(): 0 for s in Severity}
    for severity, n in recent:
        by_severity[Severity(severity).name.lower()] = n

    sentiments = {s.value: 0 for s in Sentiment}
    for sentiment, n in (
        db.query(Message.sentiment, func.count(Message.id))
        .filter(Message.role == MessageRole.USER, Message.created_at >= since, Message.sentiment.is_not(None))
        .group_by(Message.sentiment)
        .all()
    ):
        sentiments[Sentiment(sentiment).value] = n

    return {
        "period_days": days,
        "users": {"total": total_students, "active": active_students},
        "mood": {"check_ins": checkins or 0, "average": round(float(avg_mood or 0), 1)},
        "focus": {"sessions": focus_sessions or 0, "cycles": int(focus_cycles or 0)},
        "risk": {
            "open_flags": open_flags,
            "recent_flags": sum(by_severity.values()),
            "by_severity": by_severity,
        },
        "sentiment": sentiments,
    }


@router.get("/user/{user_id}")
def user_metrics(
    user_id: int,
    days: int = Query(30, ge=1, le=365),
    staff: User = Depends(require_staff),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    user = db.get(User, user_id)
    if user is None:
        raise AppError(404, "User not found")
    since = _since(days)

    checkins, avg_mood = (
        db.query(func.count(CheckIn.id), func.avg(CheckIn.mood))
        .filter(CheckIn.user_id == user_id, CheckIn.created_at >= since)
        .one()
    )
    tasks = db.query(Task).filter(Task.user_id == user_id, Task.created_at >= since).all()
    sessions = (
        db.query(FocusSession)
        .filter(FocusSession.user_id == user_id, FocusSession.started_at >= since, FocusSession.ended_at.is_not(None))
        .all()
    )
    flags = (
        db.query(func.count(RiskFlag.id))
        .filter(RiskFlag.user_id == user_id, RiskFlag.created_at >= since)
        .scalar()
        or 0
    )

    return {
        "user_id": user_id,
        "period_days": days,
        "check_ins": {"total": checkins or 0, "average_mood": round(float(avg_mood or 0), 1)},
        "tasks": {
            "total": len(tasks),
            "completed": sum(1 for t in tasks if t.status == TaskStatus.DONE),
        },
        "focus": {"sessions": len(sessions), "minutes": _focus_minutes(sessions)},
        "risk_flags": flags,
        "overreliance": detect_overreliance(db, user_id),
    }
