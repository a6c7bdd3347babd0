# talkitout/routers/checkins.py
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from ..agents.classifier import classify
from ..auth import get_current_user, get_settings
from ..config import Settings
from ..constants import AI_RATE_LIMIT, StreakType
from ..db import get_db
from ..limiter import limiter, user_or_ip
from ..models import CheckIn, User
from ..schemas import CheckInIn, CheckInOut, CheckInStats
from ..streaks import bump_streak, get_or_create_profile, streak_count

router = APIRouter(prefix="/checkins", tags=["checkins"])


@router.post("", response_model=CheckInOut, status_code=201)
@limiter.limit(AI_RATE_LIMIT, key_func=user_or_ip)
async def create_checkin(
    request: Request,
    body: CheckInIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    sentiment = None
    if body.note and body.note.strip():
        # mood notes only need the sentiment half of the verdict
        sentiment = (await classify(body.note, settings)).sentiment

    checkin = CheckIn(user_id=user.id, mood=body.mood, note=body.note, sentiment=sentiment)
    db.add(checkin)
    bump_streak(get_or_create_profile(db, user.id), StreakType.CHECKIN)
    db.commit()
    db.refresh(checkin)
    return checkin


@router.get("/me", response_model=List[CheckInOut])
def my_checkins(
    days: Optional[int] = Query(None, ge=1, le=365),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(CheckIn).filter(CheckIn.user_id == user.id)
    if days:
        q = q.filter(CheckIn.created_at >= datetime.now(timezone.utc) - timedelta(days=days))
    return q.order_by(desc(CheckIn.created_at), desc(CheckIn.id)).limit(100).all()


@router.get("/stats", response_model=CheckInStats)
def checkin_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    week_ago = datetime.now(timezone.utc) - timedelta(days=7)
    recent_count, avg_mood = (
        db.query(func.count(CheckIn.id), func.avg(CheckIn.mood))
        .filter(CheckIn.user_id == user.id, CheckIn.created_at >= week_ago)
        .one()
    )
    total = db.query(func.count(CheckIn.id)).filter(CheckIn.user_id == user.id).scalar() or 0
    return CheckInStats(
        total_check_ins=total,
        recent_check_ins=recent_count or 0,
        average_mood=round(float(avg_mood or 0), 1),
        current_streak=streak_count(get_or_create_profile(db, user.id), StreakType.CHECKIN),
    )
