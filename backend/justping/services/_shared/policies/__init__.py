"""Pure decision functions shared by services: password strength, permissions, scoping."""

from __future__ import annotations

from .common import is_same_business
from .password import PasswordValidation, ensure_password_policy, validate_password
from .permissions import has_permission, has_role, resolve_permissions

__all__ = [
    "PasswordValidation",
    "ensure_password_policy",
    "has_permission",
    "has_role",
    "is_same_business",
    "resolve_permissions",
    "validate_password",
]
