# talkitout/routers/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..auth import get_current_user, require_staff
from ..constants import StreakType, UserRole
from ..db import get_db
from ..models import User
from ..schemas import ProfileOut, ProfileUpdate, UserOut
from ..streaks import get_or_create_profile, streak_count

router = APIRouter(prefix="/users", tags=["users"])


def _profile_out(db: Session, user: User) -> ProfileOut:
    profile = get_or_create_profile(db, user.id)
    return ProfileOut(
        user=UserOut.model_validate(user),
        preferences=dict(profile.preferences or {}),
        streaks={kind.value: streak_count(profile, kind) for kind in StreakType},
    )


@router.get("/me", response_model=ProfileOut)
def me(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    out = _profile_out(db, user)
    db.commit()
    return out


@router.patch("/me", response_model=ProfileOut)
def update_me(body: ProfileUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if body.name is not None:
        user.name = body.name
    if body.school is not None:
        user.school = body.school

    profile = get_or_create_profile(db, user.id)
    if body.preferences is not None:
        prefs = dict(profile.preferences or {})
        incoming = body.preferences.model_dump(exclude_none=True)
        if "pomodoro" in incoming:
            prefs["pomodoro"] = {**(prefs.get("pomodoro") or {}), **incoming.pop("pomodoro")}
        prefs.update(incoming)
        profile.preferences = prefs

    db.commit()
    db.refresh(user)
    return _profile_out(db, user)


@router.get("", response_model=List[UserOut])
def list_users(
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
    staff: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    q = db.query(User)
    if role is not None:
        q = q.filter(User.role == role)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(User.name.ilike(like), User.email.ilike(like)))
    return q.order_by(User.name, User.id).limit(100).all()
