"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    ForgotPasswordSchema,
    LoginSchema,
    LogoutSchema,
    RefreshTokenSchema,
    RegisterSchema,
    ResetPasswordSchema,
)
from .business import BusinessUpdateSchema

__all__ = [
    "BusinessUpdateSchema",
    "ChangePasswordSchema",
    "ForgotPasswordSchema",
    "LoginSchema",
    "LogoutSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "ResetPasswordSchema",
]
