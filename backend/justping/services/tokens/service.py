"""
Token service: mints and verifies the access/refresh JWT pair.

Access tokens carry the identity and a role/permission snapshot so other
routes can authorize without a database round-trip. Refresh tokens carry
only ``userId`` and the ``tokenVersion`` seen at issuance.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import timedelta
from typing import Any

from justping.services._shared.dto import RoleSnapshot, UserSnapshot
from justping.services._shared.errors import TokenInvalidError
from justping.services._shared.ports.token_provider import TokenProvider
from justping.services.tokens.dto import ACCESS_TOKEN_TYPE, TokenConfig, TokenPairOut

log = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600
_DURATION_RE = re.compile(r"(\d+)([smhd])")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str | int | None, default: int = DEFAULT_EXPIRES_IN) -> int:
    """
    Convert ``"<int><s|m|h|d>"`` into seconds.

    Integers pass through unchanged; anything else that does not match the
    whole pattern yields ``default``.

    >>> parse_duration("15m")
    900
    >>> parse_duration("soon")
    3600
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    match = _DURATION_RE.fullmatch(str(value or "").strip())
    if not match:
        return default
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit]


class TokenService:
    """
    Issue and verify JWTs through a pluggable :class:`TokenProvider`.

    Verification distinguishes :class:`TokenExpiredError` from
    :class:`TokenInvalidError`; logout relies on decoding expired tokens.
    """

    def __init__(self, provider: TokenProvider, cfg: TokenConfig | None = None) -> None:
        self.tokens = provider
        self.cfg = cfg or TokenConfig()
        self.access_seconds = parse_duration(self.cfg.access_expires_in)
        self.refresh_seconds = parse_duration(self.cfg.refresh_expires_in, default=7 * 86400)

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def build_access_claims(
        self,
        user: UserSnapshot,
        roles: Iterable[RoleSnapshot],
        permissions: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        return {
            "userId": user.id,
            "businessId": user.business_id,
            "email": user.email,
            "roles": [role.as_claim() for role in roles],
            "permissions": dict(permissions or {}),
            "firebaseUid": user.firebase_uid,
            "metadata": {
                "firstName": user.first_name,
                "lastName": user.last_name,
                "status": user.status,
                "isOnboarded": user.is_onboarded,
            },
        }

    def issue_tokens(
        self,
        user: UserSnapshot,
        roles: Iterable[RoleSnapshot],
        permissions: Mapping[str, Any] | None,
    ) -> TokenPairOut:
        """
        Mint a fresh access/refresh pair for ``user``.

        :param user: Detached user whose ``token_version`` goes into the refresh token.
        :param roles: Roles currently held (never taken from an old token).
        :param permissions: Aggregated permission map.
        :returns: Token pair and the access lifetime in seconds.
        """
        access = self.tokens.create_access_token(
            identity=str(user.id),
            additional_claims=self.build_access_claims(user, roles, permissions),
            expires_delta=timedelta(seconds=self.access_seconds),
        )
        refresh = self.tokens.create_refresh_token(
            identity=str(user.id),
            additional_claims={"userId": user.id, "tokenVersion": user.token_version},
            expires_delta=timedelta(seconds=self.refresh_seconds),
        )
        log.debug("Issued token pair", extra={"user_id": user.id, "business_id": user.business_id})
        return TokenPairOut(access_token=access, refresh_token=refresh, expires_in=self.access_seconds)

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify(self, token: str, *, ignore_expiration: bool = False) -> dict[str, Any]:
        """
        Check signature and (optionally) expiry.

        :raises TokenExpiredError: Valid signature, ``exp`` in the past.
        :raises TokenInvalidError: Anything else.
        """
        if not token or not isinstance(token, str):
            raise TokenInvalidError()
        return self.tokens.decode(token, allow_expired=ignore_expiration)

    def verify_access(self, token: str) -> dict[str, Any]:
        claims = self.verify(token)
        if claims.get("type") != ACCESS_TOKEN_TYPE or not claims.get("userId"):
            raise TokenInvalidError()
        return claims
