"""Password strength policy applied before any credential reaches the identity provider."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

MIN_PASSWORD_LENGTH = 8

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
    (re.compile(r"[^A-Za-z0-9]"), "Password must contain at least one special character"),
)


@dataclass(frozen=True, slots=True)
class PasswordValidation:
    """
    Outcome of :func:`validate_password`.

    :param is_valid: ``True`` when no rule failed.
    :type is_valid: bool
    :param errors: Every unmet rule, in evaluation order.
    :type errors: tuple[str, ...]
    """

    is_valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)


def validate_password(password: str) -> PasswordValidation:
    """
    Check ``password`` against every strength rule.

    All rules are evaluated; nothing short-circuits, so the caller can show
    the complete list of unmet requirements at once.

    :param password: Candidate plaintext password.
    :returns: Validation result.
    """
    errors: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    for pattern, message in _RULES:
        if not pattern.search(password):
            errors.append(message)
    return PasswordValidation(is_valid=not errors, errors=tuple(errors))


def ensure_password_policy(password: str) -> None:
    """
    Raise when ``password`` fails any rule.

    :raises ValidationFailedError: Message is every error joined by ``", "``;
        ``errors`` holds them individually.
    """
    from justping.services._shared.errors import ValidationFailedError

    result = validate_password(password)
    if not result.is_valid:
        raise ValidationFailedError(", ".join(result.errors), result.errors)
