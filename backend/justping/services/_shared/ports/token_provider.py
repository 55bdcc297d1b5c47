from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol


class TokenProvider(Protocol):
    """
    Port for signing and decoding JWTs.

    ``decode`` raises ``TokenExpiredError`` for a valid signature whose
    ``exp`` has passed (unless ``allow_expired``) and ``TokenInvalidError``
    for anything else that does not verify.
    """

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode(self, token: str, *, allow_expired: bool = False) -> dict[str, Any]: ...
