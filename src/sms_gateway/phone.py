from __future__ import annotations

import re
from typing import Final

# Optional leading "+", then at least ten ASCII digits/spaces/hyphens/parentheses.
PHONE_RE: Final[re.Pattern[str]] = re.compile(r"^\+?[\d\s\-()]{10,}$", re.ASCII)

_NON_DIGIT_RE: Final[re.Pattern[str]] = re.compile(r"[^\d+]", re.ASCII)


def is_valid_phone_number(phone: str) -> bool:
    """
    Basic "looks like a phone number" check.

    Accepts international and US-style input such as "+27 12 345 6789"
    or "(555) 123-4567". This is a heuristic, not a numbering-plan check.
    """
    return PHONE_RE.fullmatch(phone) is not None


def format_phone_number(phone: str) -> str:
    """
    Reformat a number that passed is_valid_phone_number() into E.164-like form.

    - strip everything except digits and "+"
    - 11 digits starting with "1" -> "+1..." (US/Canada with country code)
    - exactly 10 digits -> "+1..." (US/Canada without country code)
    - anything else without "+" -> "+" prepended as-is
    """
    formatted = _NON_DIGIT_RE.sub("", phone)

    if formatted.startswith("+"):
        return formatted

    if formatted.startswith("1") and len(formatted) == 11:
        return "+" + formatted
    if len(formatted) == 10:
        return "+1" + formatted
    return "+" + formatted
