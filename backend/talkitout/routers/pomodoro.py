# talkitout/routers/pomodoro.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..constants import SessionType, StreakType
from ..db import get_db
from ..errors import AppError
from ..models import FocusSession, Profile, User
from ..schemas import FocusSessionOut, PomodoroState, PomodoroStop
from ..streaks import bump_streak, get_or_create_profile, pomodoro_preferences

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pomodoro", tags=["pomodoro"])


def _active_session(db: Session, user_id: int) -> Optional[FocusSession]:
    return (
        db.query(FocusSession)
        .filter(FocusSession.user_id == user_id, FocusSession.ended_at.is_(None))
        .one_or_none()
    )


@router.post("/start", response_model=FocusSessionOut, status_code=201)
def start(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if _active_session(db, user.id) is not None:
        raise AppError(400, "Session already in progress")
    session = FocusSession(user_id=user.id, type=SessionType.POMODORO, cycles_completed=0)
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


@router.post("/stop", response_model=FocusSessionOut)
def stop(
    body: Optional[PomodoroStop] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    session = _active_session(db, user.id)
    if session is None:
        raise AppError(404, "No active session found")

    cycles = body.cycles_completed if body else 0
    session.ended_at = datetime.now(timezone.utc)
    session.cycles_completed = cycles
    if cycles > 0:
        bump_streak(get_or_create_profile(db, user.id), StreakType.FOCUS)
    db.commit()
    db.refresh(session)
    logger.info("focus session %s ended user=%s cycles=%s", session.id, user.id, cycles)
    return session


@router.get("/state", response_model=PomodoroState)
def state(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = db.query(Profile).filter(Profile.user_id == user.id).one_or_none()
    active = _active_session(db, user.id)
    return PomodoroState(
        active_session=FocusSessionOut.model_validate(active) if active else None,
        preferences=pomodoro_preferences(profile),
    )


@router.get("/history", response_model=List[FocusSessionOut])
def history(
    days: Optional[int] = Query(None, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(FocusSession).filter(FocusSession.user_id == user.id, FocusSession.ended_at.is_not(None))
    if days:
        q = q.filter(FocusSession.started_at >= datetime.now(timezone.utc) - timedelta(days=days))
    return q.order_by(desc(FocusSession.started_at), desc(FocusSession.id)).limit(50).all()
