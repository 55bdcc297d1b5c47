# justping/services/auth/service.py
from __future__ import annotations

import logging

from justping.core.logger import redact_email
from justping.repositories.business_user import normalize_email
from justping.services._shared.base import BaseService, ServiceContext
from justping.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    IdentityProviderError,
    InvalidCredentialsError,
    NotFoundError,
    ServiceError,
    TokenInvalidError,
)
from justping.services._shared.policies.password import ensure_password_policy
from justping.services._shared.ports.identity_provider import IdentityProvider
from justping.services.auth.dto import (
    ChangePasswordIn,
    LoginIn,
    LoginOut,
    LogoutIn,
    RefreshIn,
    UserProfileOut,
)
from justping.services.tokens.blacklist import AccessTokenRevocation
from justping.services.tokens.dto import REFRESH_TOKEN_TYPE, TokenPairOut
from justping.services.tokens.service import TokenService
from justping.services.tokens.versioning import ensure_current, invalidate_refresh_tokens

log = logging.getLogger(__name__)

INACTIVE_ACCOUNT_MESSAGE = "Account is not active"


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout / me / change-password).

    Passwords are verified by the :class:`IdentityProvider`; this service
    loads the local user, aggregates permissions and mints tokens through
    :class:`TokenService`. Refresh tokens are gated by ``token_version``;
    access tokens are revoked through :class:`AccessTokenRevocation`.
    """

    def __init__(
        self,
        *,
        identity: IdentityProvider,
        tokens: TokenService,
        revocation: AccessTokenRevocation,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param identity: Identity-provider adapter.
        :param tokens: Token issuance/verification.
        :param revocation: Access-token blacklist wrapper.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.identity = identity
        self.tokens = tokens
        self.revocation = revocation

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: User view and token pair.
        :raises InvalidCredentialsError: On any identity-provider rejection
            or when no local user matches.
        :raises AuthorizationError: If the account is not active.
        """
        email = normalize_email(dto.email)
        try:
            self.identity.authenticate(email, dto.password)
        except ServiceError as exc:
            # Collapse every provider failure; the caller learns nothing about which factor failed
            log.info("Login rejected for %s (%s)", redact_email(email), exc.__class__.__name__)
            raise InvalidCredentialsError() from exc

        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                log.warning("Identity account without local user: %s", redact_email(email))
                raise InvalidCredentialsError()
            profile = UserProfileOut.from_models(user, uow.roles.get_user_roles(user.id))

        if not profile.user.is_active:
            raise AuthorizationError(INACTIVE_ACCOUNT_MESSAGE)

        tokens = self.tokens.issue_tokens(profile.user, profile.roles, profile.permissions)
        log.info(
            "Login succeeded",
            extra={"event": "login", "user_id": profile.user.id, "business_id": profile.user.business_id},
        )
        return LoginOut(profile=profile, tokens=tokens)

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange a refresh token for a new pair.

        Roles and permissions are reloaded from the store; nothing is copied
        from the presented token.

        :raises TokenInvalidError: Bad signature, expired, or not a refresh token.
        :raises TokenRevokedError: ``tokenVersion`` no longer current.
        :raises AuthenticationError: The user no longer exists.
        :raises AuthorizationError: The account is not active.
        """
        try:
            claims = self.tokens.verify(dto.refresh_token)
        except AuthenticationError as exc:
            raise TokenInvalidError("Invalid refresh token") from exc

        if claims.get("type") != REFRESH_TOKEN_TYPE:
            raise TokenInvalidError("Invalid token type")

        user_id = str(claims.get("userId") or claims.get("sub") or "")
        with self.ro_uow() as uow:
            user = uow.users.get(user_id) if user_id else None
            if user is None:
                raise AuthenticationError("User not found")
            ensure_current(claims, user.token_version)
            profile = UserProfileOut.from_models(user, uow.roles.get_user_roles(user.id))

        if not profile.user.is_active:
            raise AuthorizationError(INACTIVE_ACCOUNT_MESSAGE)

        return self.tokens.issue_tokens(profile.user, profile.roles, profile.permissions)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Blacklist the presented access token until its own expiry.

        The token is decoded ignoring expiration so an already expired token
        still gets an entry. With ``all_sessions`` every refresh token of
        the user is retired as well.

        :raises TokenInvalidError: Signature does not verify.
        :raises ServiceUnavailableError: Blacklist store unreachable.
        """
        claims = self.tokens.verify(dto.token, ignore_expiration=True)
        self.revocation.revoke(dto.token, claims["exp"])

        user_id = claims.get("userId") or claims.get("sub")
        if dto.all_sessions and user_id:
            with self.rw_uow() as uow:
                invalidate_refresh_tokens(uow.users, str(user_id))
        log.info("Logout", extra={"event": "logout", "user_id": user_id})

    # ------------------------------------------------------------------ #
    # Current user
    # ------------------------------------------------------------------ #

    def get_current_user(self, user_id: str) -> UserProfileOut:
        """
        Load the user behind an authenticated request with fresh roles.

        :raises NotFoundError: The user was deleted after the token was issued.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("BusinessUser", user_id, "User not found")
            return UserProfileOut.from_models(user, uow.roles.get_user_roles(user.id))

    # ------------------------------------------------------------------ #
    # Change password
    # ------------------------------------------------------------------ #

    def change_password(self, user_id: str, dto: ChangePasswordIn) -> TokenPairOut:
        """
        Replace the password after re-verifying the current one.

        Every refresh token issued before the change stops working; the
        returned pair is minted with the new ``token_version``.

        :raises ValidationFailedError: New password fails the policy.
        :raises NotFoundError: Unknown user.
        :raises InvalidCredentialsError: Current password does not match.
        """
        ensure_password_policy(dto.new_password)

        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("BusinessUser", user_id, "User not found")
            email, firebase_uid = user.email, user.firebase_uid

        if not firebase_uid:
            raise IdentityProviderError("User has no linked identity account")

        try:
            self.identity.authenticate(email, dto.current_password)
        except ServiceError as exc:
            raise InvalidCredentialsError("Current password is incorrect") from exc

        self.identity.update_password(firebase_uid, dto.new_password)

        with self.rw_uow() as uow:
            invalidate_refresh_tokens(uow.users, user_id)
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("BusinessUser", user_id, "User not found")
            uow.session.refresh(user)
            profile = UserProfileOut.from_models(user, uow.roles.get_user_roles(user_id))

        log.info("Password changed", extra={"event": "password_change", "user_id": user_id})
        return self.tokens.issue_tokens(profile.user, profile.roles, profile.permissions)
