# talkitout/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

from .prompts import CRISIS_MESSAGE, CRISIS_MESSAGE_TEMPLATE


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _origins() -> List[str]:
    frontend = os.getenv("FRONTEND_ORIGIN", "http://localhost:5173").rstrip("/")
    extra = [o.strip().rstrip("/") for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
    return list(dict.fromkeys([frontend, *extra, "http://127.0.0.1:5173"]))


@dataclass(frozen=True)
class Settings:
    """
    Process-wide configuration, built once at startup and injected into the
    classifier, responder and escalator. Tests construct it directly.
    """
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    ai_model: str = "gpt-4o-mini"
    llm_timeout: float = 20.0
    allow_external_pii: bool = False

    crisis_message: str = CRISIS_MESSAGE
    crisis_emergency: str = "999"
    crisis_sos_line: str = "1767"
    crisis_sos_text: str = "9151 1767"

    jwt_secret: str = "change_me"
    jwt_algorithm: str = "HS256"

    database_url: str = "sqlite:///./talkitout.db"
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    rate_limit_enabled: bool = True
    environment: str = "development"
    log_level: str = "INFO"

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        emergency = os.getenv("CRISIS_EMERGENCY", "999")
        sos_line = os.getenv("CRISIS_SOS_LINE", "1767")
        sos_text = os.getenv("CRISIS_SOS_TEXT", "9151 1767")
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or os.getenv("GROQ_API_KEY") or "",
            openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
            ai_model=os.getenv("AI_MODEL") or os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            llm_timeout=float(os.getenv("LLM_TIMEOUT", "20")),
            allow_external_pii=_flag("ALLOW_EXTERNAL_PII"),
            crisis_message=CRISIS_MESSAGE_TEMPLATE.format(
                emergency=emergency, sos_line=sos_line, sos_text=sos_text
            ),
            crisis_emergency=emergency,
            crisis_sos_line=sos_line,
            crisis_sos_text=sos_text,
            jwt_secret=os.getenv("JWT_SECRET", "change_me"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./talkitout.db"),
            allowed_origins=_origins(),
            rate_limit_enabled=_flag("RATE_LIMIT_ENABLED", "1"),
            environment=os.getenv("APP_ENV", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
