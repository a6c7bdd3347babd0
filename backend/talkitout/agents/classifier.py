# talkitout/agents/classifier.py
"""
Sentiment / risk classification of a single student message.

The public entry point, `classify`, never raises: every failure path (no API
key, network error, timeout, non-2xx, empty or malformed JSON, unknown enum
values) collapses into the neutral / low-risk default so the chat turn always
continues. `try_classify` keeps the failure reason for callers that want it.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Union

from pydantic import ValidationError

from ..config import Settings
from ..llm_router import complete
from ..prompts import CLASSIFIER_SYSTEM
from ..schemas import ClassificationResult
from .pseudonymizer import pseudonymize

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.S | re.I)


class ClassifierError(Exception):
    """Why a classification attempt produced no usable verdict."""

    def __init__(self, reason: str, detail: str = ""):
        super().__init__(f"{reason}: {detail}" if detail else reason)
        self.reason = reason  # "unconfigured" | "service" | "empty" | "json" | "schema"
        self.detail = detail


def strip_code_fences(raw: str) -> str:
    m = _FENCE_RE.match(raw or "")
    return m.group(1) if m else (raw or "").strip()


def parse_classification(raw: str) -> ClassificationResult:
    """Turn the model's raw text into a validated result or raise ClassifierError."""
    body = strip_code_fences(raw)
    if not body:
        raise ClassifierError("empty")
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise ClassifierError("json", str(e)) from e
    if not isinstance(payload, dict):
        raise ClassifierError("schema", f"expected object, got {type(payload).__name__}")
    try:
        return ClassificationResult.model_validate(payload)
    except ValidationError as e:
        raise ClassifierError("schema", f"{e.error_count()} validation error(s)") from e


async def try_classify(text: str, settings: Settings) -> Union[ClassificationResult, ClassifierError]:
    if not settings.llm_enabled:
        return ClassifierError("unconfigured")

    sanitized = pseudonymize(text, settings.allow_external_pii)
    messages = [
        {"role": "system", "content": CLASSIFIER_SYSTEM},
        {"role": "user", "content": sanitized},
    ]
    try:
        raw = await complete(settings, messages, temperature=0.3, max_tokens=150)
    except Exception as e:  # transport, timeout, non-2xx, bad payload
        return ClassifierError("service", f"{type(e).__name__}: {e}")

    try:
        return parse_classification(raw)
    except ClassifierError as e:
        return e


async def classify(text: str, settings: Settings) -> ClassificationResult:
    """Classify `text`; degrades to the safe default instead of raising."""
    try:
        outcome = await try_classify(text, settings)
    except Exception as e:
        logger.exception("classifier crashed unexpectedly")
        outcome = ClassifierError("internal", type(e).__name__)

    if isinstance(outcome, ClassifierError):
        if outcome.reason != "unconfigured":
            logger.warning("classification failed (%s), using safe default", outcome)
        return ClassificationResult.safe_default()
    return outcome
