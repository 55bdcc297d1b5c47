"""
Password reset: enumeration-safe request plus token-based confirmation.

The raw token only ever travels in the emailed link; the store holds its
SHA-256 digest and an expiry. Confirming a reset consumes the token, then marks the
password as created and bumps ``token_version`` once the provider accepts it.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from urllib.parse import urlencode

from sqlalchemy.exc import SQLAlchemyError

from justping.core.logger import redact_email
from justping.models.base import utcnow
from justping.repositories.business_user import normalize_email
from justping.services._shared.base import BaseService, ServiceContext
from justping.services._shared.credentials import generate_reset_token, hash_reset_token
from justping.services._shared.errors import NotFoundError, ServiceError
from justping.services._shared.policies.password import ensure_password_policy
from justping.services._shared.ports.email_sender import EmailMessage, EmailSender
from justping.services._shared.ports.identity_provider import IdentityProvider

log = logging.getLogger(__name__)

GENERIC_RESET_MESSAGE = "If your email is registered, you will receive reset instructions"
INVALID_TOKEN_MESSAGE = "Invalid or expired reset token"
RESET_SUBJECT = "Reset Your Password"
RESET_TEMPLATE = "password-reset"


class PasswordResetService(BaseService):
    """Issue and redeem password-reset tokens."""

    def __init__(
        self,
        *,
        identity: IdentityProvider,
        email_sender: EmailSender,
        frontend_url: str,
        token_ttl: timedelta = timedelta(hours=1),
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.identity = identity
        self.email_sender = email_sender
        self.frontend_url = frontend_url.rstrip("/")
        self.token_ttl = token_ttl

    def request_reset(self, email: str) -> str:
        """
        Start a reset for ``email`` if it belongs to a user.

        The return value is the same whether or not the email is known, and
        store or delivery failures are logged instead of raised, so the
        response cannot be used to discover accounts.

        :param email: Address typed by the requester.
        :returns: The generic confirmation message.
        """
        normalized = normalize_email(email)
        raw_token: str | None = None
        try:
            with self.rw_uow() as uow:
                user = uow.users.get_by_email(normalized)
                if user is not None:
                    raw_token, token_hash = generate_reset_token()
                    uow.users.save_reset_token(user.id, token_hash, utcnow() + self.token_ttl)
        except (ServiceError, SQLAlchemyError):
            log.error("Password reset request failed for %s", redact_email(normalized), exc_info=True)
            return GENERIC_RESET_MESSAGE

        if raw_token is None:
            log.info("Password reset requested for unknown email %s", redact_email(normalized))
            return GENERIC_RESET_MESSAGE

        link = f"{self.frontend_url}/reset-password?{urlencode({'token': raw_token})}"
        message = EmailMessage(
            to=normalized,
            subject=RESET_SUBJECT,
            template_name=RESET_TEMPLATE,
            variables={"resetLink": link, "year": utcnow().year},
        )
        try:
            self.email_sender.send(message)
        except Exception:
            log.error("Password reset email to %s failed", redact_email(normalized), exc_info=True)
        return GENERIC_RESET_MESSAGE

    def reset_password(self, token: str, new_password: str) -> None:
        """
        Redeem a reset token and set a new password.

        The token is consumed with one conditional update before the
        identity provider is called, so two concurrent redemptions of the
        same token cannot both succeed. If the provider rejects the new
        password the token is put back, unless a newer one was issued
        meanwhile.

        :param token: Raw token from the emailed link.
        :param new_password: Replacement password.
        :raises ValidationFailedError: Password fails the policy.
        :raises NotFoundError: No user holds an unexpired token with this
            digest, or the token was redeemed already.
        """
        ensure_password_policy(new_password)
        if not token:
            raise NotFoundError("ResetToken", "", INVALID_TOKEN_MESSAGE)

        token_hash = hash_reset_token(token)
        with self.rw_uow() as uow:
            user = uow.users.find_by_reset_token(token_hash)
            if user is None:
                raise NotFoundError("ResetToken", "", INVALID_TOKEN_MESSAGE)
            user_id, firebase_uid = user.id, user.firebase_uid
            expiry = user.credential_state.reset_token_expiry
            if not firebase_uid:
                raise NotFoundError("IdentityAccount", user_id, INVALID_TOKEN_MESSAGE)
            if not uow.users.consume_reset_token(user_id, token_hash):
                raise NotFoundError("ResetToken", "", INVALID_TOKEN_MESSAGE)

        try:
            self.identity.update_password(firebase_uid, new_password)
        except Exception:
            with self.rw_uow() as uow:
                uow.users.restore_reset_token(user_id, token_hash, expiry)
            raise

        with self.rw_uow() as uow:
            uow.users.complete_password_reset(user_id)

        log.info("Password reset completed", extra={"event": "password_reset", "user_id": user_id})
