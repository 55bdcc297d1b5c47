# justping/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

import jwt as pyjwt
from flask_jwt_extended.exceptions import JWTExtendedException

from justping.services._shared.errors import TokenExpiredError, TokenInvalidError
from justping.services._shared.ports import TokenProvider


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    The library sets ``sub``, ``type``, ``jti``, ``iat``/``nbf`` and
    ``exp``; the service adds its own claims at the top level.

    .. note::
       Requires an active Flask app context with ``JWT_SECRET_KEY`` set.
    """

    def create_access_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        from flask_jwt_extended import create_access_token as _create_access

        return cast(
            str,
            _create_access(
                identity=identity,
                additional_claims=additional_claims or {},
                expires_delta=expires_delta,
            ),
        )

    def create_refresh_token(
        self,
        *,
        identity: str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        from flask_jwt_extended import create_refresh_token as _create_refresh

        return cast(
            str,
            _create_refresh(
                identity=identity,
                additional_claims=additional_claims or {},
                expires_delta=expires_delta,
            ),
        )

    def decode(self, token: str, *, allow_expired: bool = False) -> dict[str, Any]:
        from flask_jwt_extended import decode_token

        try:
            return cast(dict[str, Any], decode_token(token, allow_expired=allow_expired))
        except pyjwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except (pyjwt.InvalidTokenError, JWTExtendedException) as exc:
            raise TokenInvalidError() from exc
