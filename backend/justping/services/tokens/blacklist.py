"""
Blacklist-based revocation for individual access tokens.

Logout stores the literal token string; every authenticated request checks
membership before trusting the signature. When the store cannot answer the
request is rejected rather than risk honoring a revoked token.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy.exc import SQLAlchemyError

from justping.services._shared.errors import ServiceUnavailableError, TokenRevokedError
from justping.services._shared.ports.token_blacklist import TokenBlacklist

log = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Authentication service temporarily unavailable"
_STORE_ERRORS = (SQLAlchemyError, RedisError, ConnectionError, TimeoutError)


class AccessTokenRevocation:
    """Wrap a :class:`TokenBlacklist` with fail-closed error handling."""

    def __init__(self, store: TokenBlacklist) -> None:
        self.store = store

    def revoke(self, token: str, exp: int | float | datetime) -> None:
        """
        Blacklist ``token`` until its own expiry.

        :param token: Raw access token.
        :param exp: Decoded ``exp`` claim (epoch seconds) or an aware datetime.
        :raises ServiceUnavailableError: If the store cannot be written.
        """
        expires_at = exp if isinstance(exp, datetime) else datetime.fromtimestamp(exp, tz=UTC)
        try:
            self.store.add(token, expires_at)
        except _STORE_ERRORS as exc:
            log.error("Token blacklist write failed: %s", exc.__class__.__name__)
            raise ServiceUnavailableError(UNAVAILABLE_MESSAGE) from exc

    def ensure_not_revoked(self, token: str) -> None:
        """
        :raises TokenRevokedError: If ``token`` was blacklisted.
        :raises ServiceUnavailableError: If the store cannot be read.
        """
        try:
            revoked = self.store.contains(token)
        except _STORE_ERRORS as exc:
            log.error("Token blacklist lookup failed: %s", exc.__class__.__name__)
            raise ServiceUnavailableError(UNAVAILABLE_MESSAGE) from exc
        if revoked:
            raise TokenRevokedError("Token has been invalidated")

    def purge_expired(self) -> int:
        """
        Drop entries whose token has expired; returns how many were removed.

        :raises ServiceUnavailableError: If the store cannot be reached.
        """
        try:
            return self.store.purge_expired()
        except _STORE_ERRORS as exc:
            log.error("Token blacklist purge failed: %s", exc.__class__.__name__)
            raise ServiceUnavailableError(UNAVAILABLE_MESSAGE) from exc
