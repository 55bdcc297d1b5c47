"""
HTTP error rendering for the auth API.

Every failure leaves the app as an RFC 7807 ``application/problem+json``
document extended with ``success: false``, a stable ``code`` and the
``request_id`` of the call. Service-layer errors are translated here and
nowhere else.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from justping.core.logger import ensure_request_id
from justping.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    IdentityProviderError,
    InvalidCredentialsError,
    NotFoundError,
    ServiceError,
    ServiceUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
    TokenRevokedError,
    ValidationFailedError,
)

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"


def problem(status: int, code: str, detail: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Build the problem document for the current request.

    :param status: HTTP status code.
    :param code: Stable, snake_case error code.
    :param detail: Client-safe message.
    :param details: Optional structured payload (e.g. unmet password rules).
    """
    doc: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path,
        "code": code,
        "success": False,
        "request_id": ensure_request_id(),
    }
    if details:
        doc["details"] = details
    return doc


def problem_response(doc: dict[str, Any]) -> tuple[Response, int]:
    resp = jsonify(doc)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, doc["status"]


# --------------------------------------------------------------------------- #
# HTTP-facing errors
# --------------------------------------------------------------------------- #


class APIError(Exception):
    """
    An error with a fixed HTTP status and code.

    Subclasses only override ``status``, ``code`` and ``default_message``.

    Parameters
    ----------
    message : str, optional
        Client-safe description; falls back to ``default_message``.
    details : dict[str, Any] | None, optional
        Structured payload rendered under ``details``.
    code : str | None, optional
        Overrides the class-level code (e.g. ``token_expired`` on a 401).
    """

    status: int = HTTPStatus.BAD_REQUEST
    code: str = "bad_request"
    default_message: str = "Bad request"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        *,
        code: str | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details or {}
        if code:
            self.code = code

    def to_problem(self) -> dict[str, Any]:
        return problem(int(self.status), self.code, self.message, self.details or None)


class BadRequest(APIError):
    pass


class Unauthorized(APIError):
    status = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"
    default_message = "Unauthorized"


class Forbidden(APIError):
    status = HTTPStatus.FORBIDDEN
    code = "forbidden"
    default_message = "Forbidden"


class NotFound(APIError):
    status = HTTPStatus.NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class Conflict(APIError):
    status = HTTPStatus.CONFLICT
    code = "conflict"
    default_message = "Conflict"


class ServiceUnavailable(APIError):
    status = HTTPStatus.SERVICE_UNAVAILABLE
    code = "service_unavailable"
    default_message = "Service temporarily unavailable"


class InternalError(APIError):
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    code = "internal_server_error"
    default_message = "Unexpected error"


# Most specific first; the first isinstance match wins.
_TRANSLATIONS: tuple[tuple[type[ServiceError], type[APIError], str | None], ...] = (
    (InvalidCredentialsError, Unauthorized, "invalid_credentials"),
    (TokenExpiredError, Unauthorized, "token_expired"),
    (TokenRevokedError, Unauthorized, "token_revoked"),
    (TokenInvalidError, Unauthorized, "token_invalid"),
    (AuthenticationError, Unauthorized, None),
    (AuthorizationError, Forbidden, None),
    (NotFoundError, NotFound, None),
    (ConflictError, Conflict, None),
    (ValidationFailedError, BadRequest, "validation_failed"),
    (ServiceUnavailableError, ServiceUnavailable, None),
)


def translate_service_error(exc: ServiceError) -> APIError:
    """
    Map a domain error onto its HTTP counterpart.

    :class:`IdentityProviderError` and unknown subclasses become a generic
    500; provider text never reaches the client.
    """
    for service_type, api_type, code in _TRANSLATIONS:
        if isinstance(exc, service_type):
            details = None
            if isinstance(exc, ValidationFailedError) and exc.errors:
                details = {"errors": list(exc.errors)}
            return api_type(str(exc), details, code=code)
    if not isinstance(exc, IdentityProviderError):
        log.warning("Untranslated service error %s", type(exc).__name__)
    return InternalError()


_HTTP_CODES = {
    HTTPStatus.METHOD_NOT_ALLOWED: "method_not_allowed",
    HTTPStatus.REQUEST_ENTITY_TOO_LARGE: "payload_too_large",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "unsupported_media_type",
    HTTPStatus.TOO_MANY_REQUESTS: "rate_limited",
}


def init_app(app: Flask) -> None:
    """
    Register the problem+json handlers.

    Notes
    -----
    - 5xx are logged with the traceback; 4xx as one warning line.
    - Raw database and provider messages stay in the logs.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        doc = err.to_problem()
        if doc["status"] >= 500:
            log.error("%s: %s", err.code, err.message)
        else:
            log.warning("%s: %s", err.code, err.message)
        return problem_response(doc)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        api_err = translate_service_error(err)
        if api_err.status >= 500:
            log.error("Service failure (%s)", type(err).__name__, exc_info=err)
        return handle_api_error(api_err)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        log.warning("validation_error on %s", request.endpoint)
        return problem_response(
            problem(HTTPStatus.UNPROCESSABLE_ENTITY, "validation_error", "Validation failed", {"errors": err.messages})
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = HTTPStatus(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.NOT_FOUND:
            code, detail = "not_found", f"Route '{request.path}' not found"
        else:
            code = _HTTP_CODES.get(status, status.phrase.lower().replace(" ", "_"))
            detail = (err.description or status.phrase).strip()
        log.warning("%s: %s %s", code, request.method, request.path)
        return problem_response(problem(status, code, detail))

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        log.error("Unhandled integrity violation", exc_info=err)
        return problem_response(problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict"))

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("Database unavailable", exc_info=err)
        return problem_response(
            problem(HTTPStatus.SERVICE_UNAVAILABLE, "service_unavailable", "Service temporarily unavailable")
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("Unhandled exception", exc_info=err)
        return problem_response(problem(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"))
