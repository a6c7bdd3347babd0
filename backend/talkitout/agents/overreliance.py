# talkitout/agents/overreliance.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..constants import (
    OVERRELIANCE_DAILY_MAX,
    OVERRELIANCE_NEGATIVE_RATIO,
    OVERRELIANCE_WEEKLY_MIN,
    MessageRole,
    Sentiment,
)
from ..models import Message


def _count_user_messages(db: Session, user_id: int, since: datetime, sentiment: Optional[Sentiment] = None) -> int:
    q = db.query(func.count(Message.id)).filter(
        Message.user_id == user_id,
        Message.role == MessageRole.USER,
        Message.created_at >= since,
    )
    if sentiment is not None:
        q = q.filter(Message.sentiment == sentiment)
    return q.scalar() or 0


def detect_overreliance(db: Session, user_id: int, now: Optional[datetime] = None) -> bool:
    """
    Advisory signal; nothing here writes or changes the conversation.
      A: more than 30 user messages in the last 24h
      B: more than 10 user messages in the last 7 days, over 70% of them negative
    """
    now = now or datetime.now(timezone.utc)

    if _count_user_messages(db, user_id, now - timedelta(days=1)) > OVERRELIANCE_DAILY_MAX:
        return True

    week_ago = now - timedelta(days=7)
    total = _count_user_messages(db, user_id, week_ago)
    if total <= OVERRELIANCE_WEEKLY_MIN:
        return False
    negative = _count_user_messages(db, user_id, week_ago, Sentiment.NEGATIVE)
    return negative / total > OVERRELIANCE_NEGATIVE_RATIO
