"""
Request authentication: turn an ``Authorization`` header into an :class:`AuthContext`.

Two credential shapes are accepted:

* ``Bearer <jwt>`` - an access token minted by :class:`TokenService`. The
  blacklist is consulted before the signature is trusted.
* ``Bearer Firebase <idToken>`` - an identity-provider ID token. The local
  user is looked up by external reference and roles are loaded from the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from justping.services._shared.base import BaseService, ServiceContext
from justping.services._shared.errors import AuthenticationError, AuthorizationError
from justping.services._shared.policies.permissions import has_permission, has_role
from justping.services._shared.ports.identity_provider import IdentityProvider
from justping.services.auth.dto import UserProfileOut
from justping.services.tokens.blacklist import AccessTokenRevocation
from justping.services.tokens.service import TokenService

log = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
FIREBASE_PREFIX = "Bearer Firebase "


@dataclass(frozen=True, slots=True)
class AuthContext:
    """
    Identity attached to an authenticated request.

    :ivar user_id: Business-user id.
    :ivar business_id: Tenant id.
    :ivar email: User email.
    :ivar roles: Role snapshots (``id``, ``name``, ``description``).
    :ivar permissions: Effective permission map.
    :ivar firebase_uid: External identity reference.
    :ivar metadata: ``firstName``, ``lastName``, ``status``, ``isOnboarded``.
    :ivar token: Raw bearer credential (needed by logout).
    :ivar via_identity_provider: ``True`` for the ``Bearer Firebase`` path.
    """

    user_id: str
    business_id: str
    email: str
    roles: tuple[dict[str, Any], ...] = ()
    permissions: dict[str, dict[str, bool]] = field(default_factory=dict)
    firebase_uid: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    token: str = field(default="", repr=False)
    via_identity_provider: bool = False

    @classmethod
    def from_claims(cls, claims: dict[str, Any], token: str) -> AuthContext:
        return cls(
            user_id=str(claims["userId"]),
            business_id=str(claims.get("businessId") or ""),
            email=str(claims.get("email") or ""),
            roles=tuple(claims.get("roles") or ()),
            permissions=dict(claims.get("permissions") or {}),
            firebase_uid=claims.get("firebaseUid"),
            metadata=dict(claims.get("metadata") or {}),
            token=token,
        )

    @classmethod
    def from_profile(cls, profile: UserProfileOut, token: str) -> AuthContext:
        user = profile.user
        return cls(
            user_id=user.id,
            business_id=user.business_id,
            email=user.email,
            roles=tuple(r.as_claim() for r in profile.roles),
            permissions=profile.permissions,
            firebase_uid=user.firebase_uid,
            metadata={
                "firstName": user.first_name,
                "lastName": user.last_name,
                "status": user.status,
                "isOnboarded": user.is_onboarded,
            },
            token=token,
            via_identity_provider=True,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "businessId": self.business_id,
            "email": self.email,
            "roles": list(self.roles),
            "permissions": self.permissions,
            "firebaseUid": self.firebase_uid,
            "metadata": self.metadata,
        }

    # ------------------------------ Guards ------------------------------

    def require_permission(self, required: str) -> None:
        """:raises AuthorizationError: If ``"resource.action"`` is not granted."""
        if not has_permission(self.permissions, required):
            raise AuthorizationError(f"Access denied: Missing '{required}' permission")

    def require_role(self, name: str) -> None:
        """:raises AuthorizationError: If no held role is called ``name``."""
        if not has_role(self.roles, name):
            raise AuthorizationError(f"Access denied: Missing '{name}' role")


class RequestAuthenticator(BaseService):
    """Resolve bearer credentials for every protected route."""

    def __init__(
        self,
        *,
        tokens: TokenService,
        revocation: AccessTokenRevocation,
        identity: IdentityProvider,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.tokens = tokens
        self.revocation = revocation
        self.identity = identity

    def authenticate(self, authorization: str | None) -> AuthContext:
        """
        :param authorization: Raw ``Authorization`` header value.
        :returns: Context for the caller.
        :raises AuthenticationError: Missing, malformed, expired, blacklisted
            or unknown credential.
        :raises ServiceUnavailableError: Blacklist store unreachable.
        """
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            raise AuthenticationError("Authentication token required")

        if authorization.startswith(FIREBASE_PREFIX):
            return self._authenticate_id_token(authorization[len(FIREBASE_PREFIX) :].strip())

        token = authorization[len(BEARER_PREFIX) :].strip()
        if not token:
            raise AuthenticationError("Authentication token required")

        self.revocation.ensure_not_revoked(token)
        claims = self.tokens.verify_access(token)
        return AuthContext.from_claims(claims, token)

    def _authenticate_id_token(self, id_token: str) -> AuthContext:
        if not id_token:
            raise AuthenticationError("Authentication token required")
        claims = self.identity.verify_id_token(id_token)
        uid = str(claims.get("uid") or claims.get("sub") or "")

        with self.ro_uow() as uow:
            user = uow.users.get_by_firebase_uid(uid) if uid else None
            if user is None:
                log.warning("ID token for unknown identity %s", uid or "<none>")
                raise AuthenticationError("User not found in system")
            profile = UserProfileOut.from_models(user, uow.roles.get_user_roles(user.id))

        return AuthContext.from_profile(profile, id_token)
