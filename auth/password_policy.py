"""
Password strength policy.

Every rule is evaluated independently so a client can show all the
problems with a candidate password at once.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from pydantic import BaseModel, Field

MIN_LENGTH = 8

# ASCII punctuation accepted as a "special character".
SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"

_RULES: List[Tuple[str, str, "re.Pattern[str] | None"]] = [
    ("minLength", f"Password must be at least {MIN_LENGTH} characters long", None),
    ("lowercase", "Password must contain at least one lowercase letter", re.compile(r"[a-z]")),
    ("uppercase", "Password must contain at least one uppercase letter", re.compile(r"[A-Z]")),
    (
        "specialCharacter",
        "Password must contain at least one special character",
        re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]"),
    ),
]


class PasswordValidationResult(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    violations: List[str] = Field(default_factory=list)  # rule codes, same order as errors


def validate_password(password: str) -> PasswordValidationResult:
    errors: List[str] = []
    violations: List[str] = []
    for code, message, pattern in _RULES:
        if pattern is None:
            ok = len(password) >= MIN_LENGTH
        else:
            ok = pattern.search(password) is not None
        if not ok:
            violations.append(code)
            errors.append(message)
    return PasswordValidationResult(is_valid=not errors, errors=errors, violations=violations)
