# talkitout/orchestrator.py
from __future__ import annotations

import asyncio
import logging
import weakref
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from .agents.classifier import classify
from .agents.responder import generate_reply
from .agents.safety import FlagDecision, escalate, flag_decision, record_flag
from .config import Settings
from .constants import MessageRole
from .models import Message, RiskFlag
from .schemas import ClassificationResult

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    classification: ClassificationResult
    user_message: Message
    ai_message: Message
    flag_decision: FlagDecision
    flag: Optional[RiskFlag] = None

    @property
    def reply_text(self) -> str:
        return self.ai_message.text


# One lock per user id so a student's rapid-fire turns read a consistent history.
# Entries vanish once no request holds the lock.
_user_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(user_id: int) -> asyncio.Lock:
    lock = _user_locks.get(user_id)
    if lock is None:
        lock = asyncio.Lock()
        _user_locks[user_id] = lock
    return lock


def _save(db: Session, msg: Message) -> Message:
    db.add(msg)
    db.commit()
    db.refresh(msg)
    return msg


async def run_turn(db: Session, settings: Settings, user_id: int, text: str) -> TurnResult:
    """
    One chat turn:
      classify -> store user message -> maybe open a risk flag
      -> generate reply -> prepend crisis resources if severe -> store reply
    Classification and generation degrade to defaults instead of raising.
    """
    async with _lock_for(user_id):
        result = await classify(text, settings)

        user_msg = _save(db, Message(
            user_id=user_id,
            role=MessageRole.USER,
            text=text,
            sentiment=result.sentiment,
            risk_tags=[t.value for t in result.risk_tags],
            severity=int(result.severity),
        ))

        decision = flag_decision(result, user_id=user_id, message_id=user_msg.id)
        flag = record_flag(db, decision)

        reply = await generate_reply(db, settings, user_id, text, before_id=user_msg.id)
        reply = escalate(reply, result.severity, settings.crisis_message)

        ai_msg = _save(db, Message(user_id=user_id, role=MessageRole.ASSISTANT, text=reply))

    logger.info(
        "chat turn user=%s sentiment=%s severity=%s flagged=%s",
        user_id, result.sentiment.value, int(result.severity), flag is not None,
    )
    return TurnResult(
        classification=result,
        user_message=user_msg,
        ai_message=ai_msg,
        flag_decision=decision,
        flag=flag,
    )
