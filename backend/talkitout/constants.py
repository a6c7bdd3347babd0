# talkitout/constants.py
from __future__ import annotations

from enum import Enum, IntEnum


class UserRole(str, Enum):
    STUDENT = "student"
    COUNSELOR = "counselor"
    ADMIN = "admin"


class Sentiment(str, Enum):
    POSITIVE = "pos"
    NEUTRAL = "neu"
    NEGATIVE = "neg"


class RiskTag(str, Enum):
    SELF_HARM = "self-harm"
    SEVERE_STRESS = "severe-stress"
    HARM_TO_OTHERS = "harm-to-others"
    OVERRELIANCE = "overreliance"


class Severity(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class FlagStatus(str, Enum):
    OPEN = "open"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TaskPriority(str, Enum):
    LOW = "low"
    MED = "med"
    HIGH = "high"


class TaskStatus(str, Enum):
    TODO = "todo"
    DOING = "doing"
    DONE = "done"


class SessionType(str, Enum):
    POMODORO = "pomodoro"
    STUDY = "study"


class StreakType(str, Enum):
    CHECKIN = "checkin"
    FOCUS = "focus"


# Severity at or above which a flagged message is escalated with crisis resources
CRISIS_SEVERITY = Severity.HIGH
# Severity at or above which a tagged message is recorded for counselor review
FLAG_SEVERITY = Severity.MEDIUM

DEFAULT_POMODORO = {
    "focus_duration": 25,
    "break_duration": 5,
    "long_break_duration": 15,
    "cycles_before_long_break": 4,
}

MOOD_MIN, MOOD_MAX = 1, 5

MAX_MESSAGE_LENGTH = 2000
MAX_NOTE_LENGTH = 1000
MAX_TASK_TITLE_LENGTH = 200

# slowapi limit strings
GENERAL_RATE_LIMIT = "100/15minutes"
AI_RATE_LIMIT = "10/minute"

# Overreliance heuristics
OVERRELIANCE_DAILY_MAX = 30
OVERRELIANCE_WEEKLY_MIN = 10
OVERRELIANCE_NEGATIVE_RATIO = 0.7
