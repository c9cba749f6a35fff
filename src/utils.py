"""Shared utilities used across the voice bot."""

import re
from datetime import datetime, timezone
from typing import Iterable, Optional


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(555) 123-4567")
        '5551234567'
        >>> normalize_phone("+1 555 123 4567")
        '+15551234567'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def contains_word(text: Optional[str], phrases: Iterable[str]) -> bool:
    """Case-insensitive whole-word test used for spoken yes/no style answers.

    "incorrect" does not contain the word "correct", and "eyes" is not "yes".
    """
    if not text:
        return False
    lowered = text.lower()
    return any(re.search(rf"\b{re.escape(phrase)}\b", lowered) for phrase in phrases)
