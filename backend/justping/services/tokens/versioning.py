"""
Version-based revocation for refresh tokens.

Every user carries a monotonically increasing ``token_version``. A refresh
token is honored only while the version it embeds equals the stored one;
bumping the counter retires every refresh token issued before it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from justping.services._shared.errors import TokenInvalidError, TokenRevokedError

log = logging.getLogger(__name__)


class _VersionedUsers(Protocol):
    def bump_token_version(self, user_id: str) -> int: ...


def embedded_version(claims: Mapping[str, Any]) -> int:
    """Return the ``tokenVersion`` claim; a missing or non-integer value is invalid."""
    raw = claims.get("tokenVersion")
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise TokenInvalidError("Invalid refresh token")
    return raw


def ensure_current(claims: Mapping[str, Any], current_version: int) -> None:
    """
    Reject a refresh token minted before the last credential change.

    :raises TokenRevokedError: When the versions differ.
    """
    if embedded_version(claims) != int(current_version):
        raise TokenRevokedError("Token has been revoked")


def invalidate_refresh_tokens(users: _VersionedUsers, user_id: str) -> int:
    """
    Retire every outstanding refresh token of ``user_id``.

    The caller owns the transaction; the increment itself is a single
    ``UPDATE ... SET token_version = token_version + 1``.

    :returns: The new version.
    """
    version = users.bump_token_version(user_id)
    log.info("Refresh tokens invalidated", extra={"user_id": user_id, "event": "token_version_bump"})
    return version
