"""
justping.services._shared.ports
===============================

*Ports* (hexagonal interfaces) through which services reach external
collaborators. Concrete adapters live under ``justping.infra``; the
in-memory doubles below are used in development and tests.

Modules
-------
- :mod:`identity_provider`:
    :class:`~.IdentityProvider`: external account creation, password
    verification and ID-token checks.
- :mod:`token_provider`:
    :class:`~.TokenProvider`: JWT signing and decoding.
- :mod:`token_blacklist`:
    :class:`~.TokenBlacklist`: explicit access-token revocation set.
- :mod:`email_sender`:
    :class:`~.EmailSender`: templated notification sink.
"""

from __future__ import annotations

from .email_sender import EmailMessage, EmailSender, InMemoryEmailSender
from .identity_provider import (
    AuthResult,
    ExternalUserRef,
    IdentityProvider,
    InMemoryIdentityProvider,
)
from .token_blacklist import InMemoryTokenBlacklist, TokenBlacklist
from .token_provider import TokenProvider

__all__ = [
    "AuthResult",
    "EmailMessage",
    "EmailSender",
    "ExternalUserRef",
    "IdentityProvider",
    "InMemoryEmailSender",
    "InMemoryIdentityProvider",
    "InMemoryTokenBlacklist",
    "TokenBlacklist",
    "TokenProvider",
]
