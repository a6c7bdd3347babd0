# talkitout/routers/chat.py
import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..auth import get_current_user, get_settings
from ..config import Settings
from ..constants import AI_RATE_LIMIT
from ..db import get_db
from ..limiter import limiter, user_or_ip
from ..models import Message, RiskFlag, User
from ..orchestrator import run_turn
from ..schemas import ChatRequest, ChatResponse, HistoryResponse, MessageOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/message", response_model=ChatResponse)
@limiter.limit(AI_RATE_LIMIT, key_func=user_or_ip)
async def send_message(
    request: Request,
    body: ChatRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Store the student's message, classify it, and reply (crisis resources first when severe)."""
    turn = await run_turn(db, settings, user.id, body.text)
    return ChatResponse(
        user_message=MessageOut.model_validate(turn.user_message),
        ai_message=MessageOut.model_validate(turn.ai_message),
        flagged=turn.flag is not None,
    )


@router.get("/history", response_model=HistoryResponse)
def history(
    limit: int = Query(50, ge=1, le=200),
    skip: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(Message)
        .filter(Message.user_id == user.id)
        .order_by(desc(Message.created_at), desc(Message.id))
        .offset(skip)
        .limit(limit)
        .all()
    )
    return HistoryResponse(messages=[MessageOut.model_validate(m) for m in reversed(rows)])


@router.delete("/history")
def clear_history(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    # flagged messages stay so every open flag still has its message
    flagged_ids = select(RiskFlag.message_id).where(RiskFlag.user_id == user.id)
    deleted = (
        db.query(Message)
        .filter(Message.user_id == user.id, Message.id.not_in(flagged_ids))
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("user=%s cleared %s messages", user.id, deleted)
    return {"message": "Chat history cleared", "deleted": deleted}
