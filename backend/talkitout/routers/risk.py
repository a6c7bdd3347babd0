# talkitout/routers/risk.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..agents.overreliance import detect_overreliance
from ..auth import require_staff
from ..constants import FlagStatus
from ..db import get_db
from ..errors import AppError
from ..models import Audit, Message, RiskFlag, User
from ..schemas import MessageOut, OverrelianceOut, RiskFlagDetail, RiskFlagOut, RiskFlagUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/risk", tags=["risk"])

CONTEXT_WINDOW = timedelta(hours=1)


def apply_update(flag: RiskFlag, update: RiskFlagUpdate, reviewer_id: int) -> None:
    """
    Counselor edit. Any status may move to any other (open -> in_review -> resolved,
    reopen, or straight to resolved). resolved_at tracks the resolved state.
    """
    if update.status is not None and update.status != flag.status:
        flag.status = update.status
        if update.status == FlagStatus.RESOLVED:
            flag.resolved_at = datetime.now(timezone.utc)
        else:
            flag.resolved_at = None
    if update.notes is not None:
        flag.notes = update.notes
    flag.reviewed_by = reviewer_id


def _get_flag(db: Session, flag_id: int) -> RiskFlag:
    flag = db.get(RiskFlag, flag_id)
    if flag is None:
        raise AppError(404, "Risk flag not found")
    return flag


@router.get("/flags", response_model=List[RiskFlagOut])
def list_flags(
    status: Optional[FlagStatus] = None,
    severity: Optional[int] = Query(None, ge=1, le=3),
    user_id: Optional[int] = None,
    limit: int = Query(100, ge=1, le=100),
    staff: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    q = db.query(RiskFlag)
    if status is not None:
        q = q.filter(RiskFlag.status == status)
    if severity is not None:
        q = q.filter(RiskFlag.severity == severity)
    if user_id is not None:
        q = q.filter(RiskFlag.user_id == user_id)
    return q.order_by(desc(RiskFlag.severity), desc(RiskFlag.created_at), desc(RiskFlag.id)).limit(limit).all()


@router.get("/flags/{flag_id}", response_model=RiskFlagDetail)
def get_flag(flag_id: int, staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    """Flag plus the student's messages from an hour either side of it."""
    flag = _get_flag(db, flag_id)
    context = (
        db.query(Message)
        .filter(
            Message.user_id == flag.user_id,
            Message.created_at >= flag.created_at - CONTEXT_WINDOW,
            Message.created_at <= flag.created_at + CONTEXT_WINDOW,
        )
        .order_by(Message.created_at, Message.id)
        .all()
    )
    return RiskFlagDetail(
        flag=RiskFlagOut.model_validate(flag),
        context=[MessageOut.model_validate(m) for m in context],
    )


@router.patch("/flags/{flag_id}", response_model=RiskFlagOut)
def update_flag(
    flag_id: int,
    body: RiskFlagUpdate,
    staff: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    flag = _get_flag(db, flag_id)
    previous = flag.status
    apply_update(flag, body, staff.id)
    db.add(Audit(
        actor_id=staff.id,
        action="risk_flag_update",
        entity="RiskFlag",
        entity_id=flag.id,
        meta={"from": previous.value, "to": flag.status.value},
    ))
    db.commit()
    db.refresh(flag)
    logger.info("risk flag %s %s -> %s by counselor=%s", flag.id, previous.value, flag.status.value, staff.id)
    return flag


@router.get("/overreliance/{user_id}", response_model=OverrelianceOut)
def overreliance(user_id: int, staff: User = Depends(require_staff), db: Session = Depends(get_db)):
    if db.get(User, user_id) is None:
        raise AppError(404, "User not found")
    return OverrelianceOut(user_id=user_id, overreliance=detect_overreliance(db, user_id))
