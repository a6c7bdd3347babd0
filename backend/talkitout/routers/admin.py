# talkitout/routers/admin.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..auth import get_settings
from ..config import Settings

API_VERSION = "1.0.0"

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/config/public")
def public_config(settings: Settings = Depends(get_settings)):
    return {
        "environment": settings.environment,
        "api_version": API_VERSION,
        "features": {
            "ai_chat": settings.llm_enabled,
            "rate_limiting": settings.rate_limit_enabled,
        },
        "crisis": {
            "emergency": settings.crisis_emergency,
            "sos_line": settings.crisis_sos_line,
            "sos_text": settings.crisis_sos_text,
        },
    }
