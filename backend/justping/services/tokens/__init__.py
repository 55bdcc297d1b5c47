"""Token issuance, verification and the two revocation mechanisms."""

from __future__ import annotations

from .blacklist import AccessTokenRevocation
from .dto import TokenConfig, TokenPairOut
from .service import TokenService, parse_duration
from .versioning import ensure_current, invalidate_refresh_tokens

__all__ = [
    "AccessTokenRevocation",
    "TokenConfig",
    "TokenPairOut",
    "TokenService",
    "ensure_current",
    "invalidate_refresh_tokens",
    "parse_duration",
]
