"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They are the stable contract between repositories, ports,
adapters and application services.

The translation to HTTP responses (RFC 7807) is handled by
``justping/core/errors.py`` via :func:`translate_service_error`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, adapters or domain logic.
    - The HTTP layer translates them to ``APIError`` in one place.
    """

    pass


# --------------------------------------------------------------------------- #
# Lookup / uniqueness
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "BusinessUser").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    :param message: Optional client-safe message overriding the default.
    :type message: str | None
    """

    entity: str
    key: str | int
    message: str | None = None

    def __str__(self) -> str:
        return self.message or f"{self.entity} not found"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "Business").
    :type entity: str
    :param detail: Short human-readable explanation, safe for clients.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail


# --------------------------------------------------------------------------- #
# Authentication / authorization
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """The caller could not be authenticated (maps to 401)."""

    default_message = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair rejected, or the current password did not match."""

    default_message = "Invalid credentials"


class TokenExpiredError(AuthenticationError):
    """Signature is valid but the ``exp`` claim has passed."""

    default_message = "Token expired"


class TokenInvalidError(AuthenticationError):
    """Malformed token, bad signature or wrong token type."""

    default_message = "Invalid token"


class TokenRevokedError(AuthenticationError):
    """Token was explicitly blacklisted or its version is stale."""

    default_message = "Token has been revoked"


class AuthorizationError(ServiceError):
    """Authenticated but not allowed: inactive account, missing role or permission."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Input / infrastructure
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ValidationFailedError(ServiceError):
    """
    Raised when input passes schema validation but fails a domain policy.

    :param message: Summary, safe for clients.
    :type message: str
    :param errors: Every unmet rule, in evaluation order.
    :type errors: Sequence[str]
    """

    message: str
    errors: Sequence[str] = field(default_factory=tuple)

    def __str__(self) -> str:
        return self.message


class ServiceUnavailableError(ServiceError):
    """A required backing store could not be reached; the request fails closed."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message)


class IdentityProviderError(ServiceError):
    """Unexpected failure talking to the external identity provider."""

    def __init__(self, message: str = "Identity provider error") -> None:
        super().__init__(message)
