# talkitout/streaks.py
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Dict, Optional

from sqlalchemy.orm import Session

from .constants import DEFAULT_POMODORO, StreakType
from .models import Profile


def get_or_create_profile(db: Session, user_id: int) -> Profile:
    profile = db.query(Profile).filter(Profile.user_id == user_id).one_or_none()
    if profile is None:
        profile = Profile(
            user_id=user_id,
            preferences={"pomodoro": dict(DEFAULT_POMODORO), "notifications": True},
            streaks={},
        )
        db.add(profile)
        db.flush()
    return profile


def pomodoro_preferences(profile: Optional[Profile]) -> Dict[str, int]:
    prefs = dict(DEFAULT_POMODORO)
    if profile is not None:
        prefs.update((profile.preferences or {}).get("pomodoro") or {})
    return prefs


def bump_streak(profile: Profile, kind: StreakType, today: Optional[date] = None) -> int:
    """
    Same day: unchanged. Consecutive day: +1. Any longer gap: back to 1.
    Returns the new count. Caller commits.
    """
    today = today or datetime.now(timezone.utc).date()
    streaks = dict(profile.streaks or {})
    current = streaks.get(kind.value)

    if current is None:
        current = {"count": 1, "last_date": today.isoformat()}
    else:
        gap = (today - date.fromisoformat(current["last_date"])).days
        if gap == 1:
            current = {"count": current["count"] + 1, "last_date": today.isoformat()}
        elif gap > 1:
            current = {"count": 1, "last_date": today.isoformat()}

    streaks[kind.value] = current
    # reassign so SQLAlchemy notices the JSON change
    profile.streaks = streaks
    return current["count"]


def streak_count(profile: Optional[Profile], kind: StreakType) -> int:
    if profile is None:
        return 0
    return ((profile.streaks or {}).get(kind.value) or {}).get("count", 0)
