from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")
POSTAL_CODE_LENGTH = 8
BLOCKED_POSTAL_CODES = frozenset(str(digit) * POSTAL_CODE_LENGTH for digit in range(10))


def normalize_postal_code(code: str | None) -> str:
    if not code:
        return ""
    return _NON_DIGITS.sub("", str(code))


def validate_postal_code(code: str | None) -> bool:
    clean = normalize_postal_code(code)
    if len(clean) != POSTAL_CODE_LENGTH:
        return False
    return clean not in BLOCKED_POSTAL_CODES
