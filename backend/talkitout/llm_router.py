# talkitout/llm_router.py
from __future__ import annotations

import logging
from typing import Dict, List

import httpx

from .config import Settings

logger = logging.getLogger(__name__)


class LLMNotConfigured(RuntimeError):
    """Raised when a completion is requested without an API key."""


async def complete(
    settings: Settings,
    messages: List[Dict[str, str]],
    temperature: float = 0.7,
    max_tokens: int = 500,
) -> str:
    """
    Single-shot call to an OpenAI-compatible Chat Completions endpoint.
    Returns the stripped assistant text ("" if the service sent nothing).
    Raises httpx errors on transport failure / non-2xx; callers decide the fallback.
    """
    if not settings.llm_enabled:
        raise LLMNotConfigured("OPENAI_API_KEY is not set")

    body = {
        "model": settings.ai_model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    async with httpx.AsyncClient(timeout=settings.llm_timeout) as client:
        r = await client.post(
            f"{settings.openai_base_url.rstrip('/')}/chat/completions",
            headers={"Authorization": f"Bearer {settings.openai_api_key}"},
            json=body,
        )
        r.raise_for_status()
        data = r.json()

    logger.debug("llm model=%s usage=%s", data.get("model"), data.get("usage"))
    choices = data.get("choices") or []
    if not choices:
        return ""
    return ((choices[0].get("message") or {}).get("content") or "").strip()
