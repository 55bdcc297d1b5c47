"""Shared API helpers: response envelopes, service wiring and auth guards."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from justping.core.extensions import get_email_sender, get_identity_provider, get_token_blacklist
from justping.infra.jwt import JWTTokenProvider
from justping.services._shared.base import ServiceContext
from justping.services._shared.errors import AuthenticationError
from justping.services.auth import AuthContext, AuthService, RequestAuthenticator
from justping.services.business import BusinessService
from justping.services.password_reset import PasswordResetService
from justping.services.registration import RegistrationService
from justping.services.tokens import AccessTokenRevocation, TokenConfig, TokenService

F = TypeVar("F", bound=Callable[..., Any])


# ------------------------------ Responses ------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def success(data: Any = None, *, message: str | None = None, status: int = 200) -> Response:
    """Wrap ``data`` in the ``{success, message, data}`` envelope."""

    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return json_response(body, status=status)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# ------------------------------ Service wiring ------------------------------


def service_context() -> ServiceContext:
    auth = cast(AuthContext | None, g.get("auth"))
    return ServiceContext(
        actor_id=auth.user_id if auth else None,
        business_id=auth.business_id if auth else None,
        request_id=g.get("request_id"),
    )


def token_service() -> TokenService:
    cfg = current_app.config
    return TokenService(
        JWTTokenProvider(),
        TokenConfig(
            access_expires_in=str(cfg.get("JWT_ACCESS_EXPIRES_IN", "1h")),
            refresh_expires_in=str(cfg.get("JWT_REFRESH_EXPIRES_IN", "7d")),
        ),
    )


def access_revocation() -> AccessTokenRevocation:
    return AccessTokenRevocation(get_token_blacklist())


def auth_service() -> AuthService:
    return AuthService(
        identity=get_identity_provider(),
        tokens=token_service(),
        revocation=access_revocation(),
        ctx=service_context(),
    )


def registration_service() -> RegistrationService:
    cfg = current_app.config
    return RegistrationService(
        identity=get_identity_provider(),
        email_sender=get_email_sender(),
        frontend_url=str(cfg["FRONTEND_URL"]),
        token_ttl=timedelta(hours=int(cfg.get("REGISTRATION_TOKEN_TTL_HOURS", 24))),
        compensate_identity=bool(cfg.get("REGISTRATION_COMPENSATE_IDENTITY", True)),
        ctx=service_context(),
    )


def password_reset_service() -> PasswordResetService:
    cfg = current_app.config
    return PasswordResetService(
        identity=get_identity_provider(),
        email_sender=get_email_sender(),
        frontend_url=str(cfg["FRONTEND_URL"]),
        token_ttl=timedelta(hours=int(cfg.get("PASSWORD_RESET_TOKEN_TTL_HOURS", 1))),
        ctx=service_context(),
    )


def business_service() -> BusinessService:
    return BusinessService(ctx=service_context())


# ------------------------------ Auth guards ------------------------------


def current_auth() -> AuthContext:
    """Return the context set by :func:`require_auth`."""

    auth = cast(AuthContext | None, g.get("auth"))
    if auth is None:
        raise AuthenticationError("Authentication token required")
    return auth


def require_auth(func: F) -> F:
    """Authenticate the ``Authorization`` header and expose the result as ``g.auth``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        authenticator = RequestAuthenticator(
            tokens=token_service(),
            revocation=access_revocation(),
            identity=get_identity_provider(),
        )
        g.auth = authenticator.authenticate(request.headers.get("Authorization"))
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_permission(required: str) -> Callable[[F], F]:
    """Ensure the caller holds ``"resource.action"``; apply below :func:`require_auth`."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            current_auth().require_permission(required)
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def require_role(name: str) -> Callable[[F], F]:
    """Ensure the caller holds a role called ``name``; apply below :func:`require_auth`."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            current_auth().require_role(name)
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
