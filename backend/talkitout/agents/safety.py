# talkitout/agents/safety.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from ..constants import CRISIS_SEVERITY, FLAG_SEVERITY, FlagStatus, RiskTag, Severity
from ..models import RiskFlag
from ..prompts import CRISIS_MESSAGE
from ..schemas import ClassificationResult

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Crisis escalation
# -----------------------------------------------------------------------------
def escalate(reply: str, severity: int, crisis_message: str = CRISIS_MESSAGE) -> str:
    """Prefix the crisis resources when severity is HIGH; otherwise return reply untouched."""
    if severity >= CRISIS_SEVERITY:
        return f"{crisis_message}\n\n{reply}"
    return reply


# -----------------------------------------------------------------------------
# Risk flag recording
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class FlagDecision:
    create: bool
    user_id: int
    message_id: int
    tags: List[RiskTag] = field(default_factory=list)
    severity: Severity = Severity.LOW


def should_flag(result: ClassificationResult) -> bool:
    # both conditions: a severe but untagged verdict is not reviewable on its own
    return result.severity >= FLAG_SEVERITY and len(result.risk_tags) > 0


def flag_decision(result: ClassificationResult, user_id: int, message_id: int) -> FlagDecision:
    return FlagDecision(
        create=should_flag(result),
        user_id=user_id,
        message_id=message_id,
        tags=list(result.risk_tags),
        severity=result.severity,
    )


def record_flag(db: Session, decision: FlagDecision) -> Optional[RiskFlag]:
    """Persist an open flag for counselor review if the decision says so."""
    if not decision.create:
        return None
    flag = RiskFlag(
        user_id=decision.user_id,
        message_id=decision.message_id,
        tags=[t.value for t in decision.tags],
        severity=int(decision.severity),
        status=FlagStatus.OPEN,
    )
    db.add(flag)
    db.commit()
    db.refresh(flag)
    logger.warning(
        "risk flag %s opened user=%s severity=%s tags=%s",
        flag.id, decision.user_id, flag.severity, ",".join(flag.tags),
    )
    return flag
