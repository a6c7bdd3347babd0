# talkitout/agents/responder.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..config import Settings
from ..constants import MessageRole
from ..llm_router import complete
from ..models import Message
from ..prompts import ASSISTANT_SYSTEM, FALLBACK_EMPTY, FALLBACK_ERROR, FALLBACK_UNCONFIGURED
from .pseudonymizer import pseudonymize

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10


def fetch_history(
    db: Session,
    user_id: int,
    limit: int = HISTORY_LIMIT,
    before_id: Optional[int] = None,
) -> List[Message]:
    """Last `limit` messages for the user, oldest -> newest."""
    q = db.query(Message).filter(Message.user_id == user_id)
    if before_id is not None:
        q = q.filter(Message.id < before_id)
    rows = (
        q
        .order_by(desc(Message.created_at), desc(Message.id))
        .limit(limit)
        .all()
    )
    return list(reversed(rows))


def render_history(rows: List[Message]) -> str:
    lines = []
    for m in rows:
        speaker = "Student" if m.role == MessageRole.USER else "Assistant"
        lines.append(f"{speaker}: {m.text}")
    return "\n".join(lines)


def build_prompt(history: str, sanitized_text: str) -> str:
    parts = []
    if history:
        parts.append(f"Recent conversation:\n{history}")
    parts.append(f"Student: {sanitized_text}\nAssistant:")
    return "\n\n".join(parts)


async def generate_reply(
    db: Session,
    settings: Settings,
    user_id: int,
    user_text: str,
    history_limit: int = HISTORY_LIMIT,
    before_id: Optional[int] = None,
) -> str:
    """
    Ask the companion model for a reply to `user_text`, with recent history as context.
    `before_id` keeps the just-stored turn out of the history block.
    Never raises; persistence of the exchange is the caller's job.
    """
    if not settings.llm_enabled:
        return FALLBACK_UNCONFIGURED

    try:
        # Stored history is raw text, so it goes through the same scrubber
        rows = fetch_history(db, user_id, history_limit, before_id)
        history = render_history(rows)
        history = pseudonymize(history, settings.allow_external_pii)
        sanitized = pseudonymize(user_text, settings.allow_external_pii)

        messages = [
            {"role": "system", "content": ASSISTANT_SYSTEM},
            {"role": "user", "content": build_prompt(history, sanitized)},
        ]
        reply = await complete(settings, messages, temperature=0.7, max_tokens=500)
    except Exception as e:
        logger.warning("reply generation failed for user=%s: %s", user_id, type(e).__name__)
        return FALLBACK_ERROR

    return reply.strip() or FALLBACK_EMPTY
