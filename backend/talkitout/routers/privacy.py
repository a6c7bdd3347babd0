# talkitout/routers/privacy.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..db import get_db
from ..errors import AppError
from ..models import Audit, CheckIn, FocusSession, Message, Profile, RiskFlag, Task, User
from ..schemas import CheckInOut, DeleteConfirmation, FocusSessionOut, MessageOut, TaskOut, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/privacy", tags=["privacy"])


def export_user_data(db: Session, user: User) -> Dict[str, Any]:
    """Everything we hold about one account, in the shape returned to the student."""
    profile = db.query(Profile).filter(Profile.user_id == user.id).one_or_none()
    messages = db.query(Message).filter(Message.user_id == user.id).order_by(Message.created_at, Message.id).all()
    checkins = db.query(CheckIn).filter(CheckIn.user_id == user.id).order_by(CheckIn.created_at).all()
    tasks = db.query(Task).filter(Task.user_id == user.id).order_by(Task.created_at).all()
    sessions = db.query(FocusSession).filter(FocusSession.user_id == user.id).order_by(FocusSession.started_at).all()

    return {
        "user": UserOut.model_validate(user).model_dump(mode="json"),
        "profile": {
            "preferences": profile.preferences if profile else {},
            "streaks": profile.streaks if profile else {},
        },
        "messages": [MessageOut.model_validate(m).model_dump(mode="json") for m in messages],
        "check_ins": [CheckInOut.model_validate(c).model_dump(mode="json") for c in checkins],
        "tasks": [TaskOut.model_validate(t).model_dump(mode="json") for t in tasks],
        "focus_sessions": [FocusSessionOut.model_validate(s).model_dump(mode="json") for s in sessions],
        "exported_at": datetime.now(timezone.utc).isoformat(),
    }


def erase_user(db: Session, user_id: int) -> None:
    # flags first: they reference messages
    for model in (RiskFlag, Message, CheckIn, Task, FocusSession, Profile):
        db.query(model).filter(model.user_id == user_id).delete(synchronize_session=False)
    # flags this account reviewed belong to other students and stay
    db.query(RiskFlag).filter(RiskFlag.reviewed_by == user_id).update(
        {RiskFlag.reviewed_by: None}, synchronize_session=False
    )
    db.query(Audit).filter(Audit.actor_id == user_id).delete(synchronize_session=False)
    db.query(User).filter(User.id == user_id).delete(synchronize_session=False)


@router.get("/export")
def export(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    data = export_user_data(db, user)
    db.add(Audit(actor_id=user.id, action="data_export", entity="User", entity_id=user.id))
    db.commit()
    logger.info("data export user=%s", user.id)
    return data


@router.post("/delete")
def delete_account(
    body: DeleteConfirmation,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if body.confirmation != "DELETE":
        raise AppError(400, 'Confirmation required. Send {"confirmation": "DELETE"}')

    user_id = user.id
    db.expunge(user)
    erase_user(db, user_id)
    # the deletion record outlives the account it describes
    db.add(Audit(actor_id=user_id, action="account_deletion", entity="User", entity_id=user_id))
    db.commit()
    logger.warning("account deleted user=%s", user_id)
    return {"message": "Account and all data deleted successfully"}
