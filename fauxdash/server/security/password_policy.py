"""
Password strength rules.

``validate_password`` collects every violated rule instead of stopping at the
first one, so a client can show the full list at once.
"""

from __future__ import annotations

import re
from typing import List

from pydantic import BaseModel, Field

COMMON_PASSWORDS = frozenset(
    {
        "password",
        "12345678",
        "123456789",
        "qwerty123",
        "admin123",
        "letmein1",
        "welcome1",
        "password1",
        "iloveyou",
        "sunshine",
        "princess",
        "football",
        "baseball",
        "trustno1",
        "superman",
        "iloveyou1",
        "master123",
        "hello123",
        "charlie1",
        "donald12",
    }
)

_REPEATED = re.compile(r"(.)\1{3,}")
_SEQUENCES = [
    "abcdefghijklmnopqrstuvwxyz"[i : i + 3] for i in range(24)
] + ["0123456789"[i : i + 3] for i in range(8)]


class PasswordPolicy(BaseModel):
    """Configurable password requirements."""

    min_length: int = Field(default=8, ge=1)
    max_length: int = Field(default=128, ge=1)
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_numbers: bool = True
    require_special_chars: bool = False

    model_config = {"frozen": True}


class PasswordValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


DEFAULT_POLICY = PasswordPolicy()
SIMPLE_POLICY = PasswordPolicy(
    require_uppercase=False,
    require_lowercase=False,
    require_numbers=False,
)
STRICT_POLICY = PasswordPolicy(min_length=12, require_special_chars=True)


def _has_sequence(password: str) -> bool:
    lowered = password.lower()
    return any(seq in lowered for seq in _SEQUENCES)


def validate_password(password: str, policy: PasswordPolicy = DEFAULT_POLICY) -> PasswordValidationResult:
    """Validate a password against a policy.

    Args:
        password: Candidate password
        policy: Requirements to apply, defaults to upper + lower + digit, 8..128 chars

    Returns:
        Result with ``valid`` and the list of human readable errors
    """
    errors: List[str] = []

    if len(password) < policy.min_length:
        errors.append(f"Password must be at least {policy.min_length} characters")
    if len(password) > policy.max_length:
        errors.append(f"Password must not exceed {policy.max_length} characters")

    if policy.require_uppercase and not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if policy.require_lowercase and not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if policy.require_numbers and not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")
    if policy.require_special_chars and not re.search(r"[^a-zA-Z0-9]", password):
        errors.append("Password must contain at least one special character")

    if password.lower() in COMMON_PASSWORDS:
        errors.append("This password is too common. Please choose a stronger password")
    if _REPEATED.search(password):
        errors.append("Password cannot contain more than 3 repeated characters in a row")
    if _has_sequence(password):
        errors.append('Password cannot contain sequential characters (e.g., "abc", "123")')

    return PasswordValidationResult(valid=not errors, errors=errors)


def validate_password_simple(password: str) -> PasswordValidationResult:
    return validate_password(password, SIMPLE_POLICY)


def validate_password_strict(password: str) -> PasswordValidationResult:
    return validate_password(password, STRICT_POLICY)
