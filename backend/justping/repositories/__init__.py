"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from justping.repositories.base import BaseRepository
from justping.repositories.business import BusinessRepository
from justping.repositories.business_user import BusinessUserRepository, normalize_email
from justping.repositories.role import RoleRepository
from justping.repositories.token_blacklist import TokenBlacklistRepository, token_digest

__all__ = [
    # Base
    "BaseRepository",
    # Domain
    "BusinessRepository",
    "BusinessUserRepository",
    "RoleRepository",
    "TokenBlacklistRepository",
    # Helpers
    "normalize_email",
    "token_digest",
]
