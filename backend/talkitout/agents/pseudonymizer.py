# talkitout/agents/pseudonymizer.py
"""
Best-effort PII scrubbing applied before any text leaves the service.

This is a last line of defence, not an anonymity guarantee: it only knows a
handful of Singapore-specific patterns plus two self-introduction phrases.
"""
from __future__ import annotations

import re
from typing import Dict, Optional

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
# Singapore mobile / landline, optional +65 prefix
PHONE_RE = re.compile(r"(?:\+65\s?)?\b[689]\d{7}\b")
# NRIC / FIN
NRIC_RE = re.compile(r"\b[STFG]\d{7}[A-Z]\b")

_NAME = r"[A-Z][a-z]+(?: [A-Z][a-z]+)?\b"
NAME_PATTERNS = [
    re.compile(rf"\b(my name is ){_NAME}", re.I),
    # "I'm" also opens "I'm tired", so only a capitalized word counts as a name
    re.compile(rf"\b((?i:i'm) ){_NAME}"),
]


def pseudonymize(text: str, allow_external_pii: bool = False) -> str:
    """Replace emails, phone numbers, ID numbers and self-disclosed names with placeholders."""
    if allow_external_pii or not text:
        return text

    out = EMAIL_RE.sub("[EMAIL]", text)
    out = PHONE_RE.sub("[PHONE]", out)
    out = NRIC_RE.sub("[ID]", out)
    for pat in NAME_PATTERNS:
        out = pat.sub(r"\g<1>[NAME]", out)
    return out


def contains_pii(text: str) -> bool:
    if not text:
        return False
    return any(p.search(text) for p in (EMAIL_RE, PHONE_RE, NRIC_RE))


def mask_user_data(
    email: Optional[str] = None,
    name: Optional[str] = None,
    phone: Optional[str] = None,
) -> Dict[str, Optional[str]]:
    return {
        "email": "[EMAIL]" if email else None,
        "name": "[NAME]" if name else None,
        "phone": "[PHONE]" if phone else None,
    }
