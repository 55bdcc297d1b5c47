"""Unit tests for the password strength policy."""

from __future__ import annotations

import pytest

from justping.services._shared.errors import ValidationFailedError
from justping.services._shared.policies import ensure_password_policy, validate_password


def test_strong_password_passes():
    result = validate_password("Str0ng!Pass")
    assert result.is_valid is True
    assert result.errors == ()


def test_every_failed_rule_is_reported_in_order():
    result = validate_password("short")
    assert result.is_valid is False
    assert result.errors == (
        "Password must be at least 8 characters long",
        "Password must contain at least one uppercase letter",
        "Password must contain at least one number",
        "Password must contain at least one special character",
    )


def test_empty_password_fails_every_rule():
    assert len(validate_password("").errors) == 5


@pytest.mark.parametrize(
    ("password", "missing"),
    [
        ("alllower1!", "uppercase"),
        ("ALLUPPER1!", "lowercase"),
        ("NoDigits!!", "number"),
        ("NoSpecial1", "special character"),
    ],
)
def test_single_missing_rule(password, missing):
    result = validate_password(password)
    assert len(result.errors) == 1
    assert missing in result.errors[0]


def test_unicode_counts_as_special_character():
    assert validate_password("Passw0rdé").is_valid is True


def test_ensure_policy_raises_with_joined_message():
    with pytest.raises(ValidationFailedError) as excinfo:
        ensure_password_policy("abc")
    err = excinfo.value
    assert str(err) == ", ".join(err.errors)
    assert "Password must be at least 8 characters long" in err.errors


def test_ensure_policy_accepts_valid_password():
    ensure_password_policy("Val1d#Password")
