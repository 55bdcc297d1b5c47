"""
RegistrationService
===================

Process-level service that signs up a new tenant:

- Rejects an already-registered email before opening a transaction.
- Creates ``Business``, the external identity account, the ``BusinessUser``,
  the business' ``Admin`` role and the user's set-password token in one
  transaction.
- Deletes the external identity account again when the local transaction
  fails after it was created (configurable).
- Sends the welcome email only after commit; delivery failures are logged
  and never undo the registration.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from urllib.parse import urlencode

from justping.core.logger import redact_email
from justping.models.base import utcnow
from justping.repositories.business_user import normalize_email
from justping.services._shared.base import BaseService, ServiceContext
from justping.services._shared.credentials import generate_reset_token, generate_temp_password
from justping.services._shared.errors import (
    ConflictError,
    ServiceError,
    ValidationFailedError,
)
from justping.services._shared.ports.email_sender import EmailMessage, EmailSender
from justping.services._shared.ports.identity_provider import ExternalUserRef, IdentityProvider
from justping.services.registration.dto import RegistrationIn, RegistrationOut

log = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Business already exists with this email"
WELCOME_SUBJECT = "Complete Your JustPing Registration"
WELCOME_TEMPLATE = "welcome"


class RegistrationService(BaseService):
    """
    Orchestrates business sign-up across the local store and the identity provider.
    """

    def __init__(
        self,
        *,
        identity: IdentityProvider,
        email_sender: EmailSender,
        frontend_url: str,
        token_ttl: timedelta = timedelta(hours=24),
        compensate_identity: bool = True,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param identity: Identity-provider adapter.
        :param email_sender: Notification sink for the welcome email.
        :param frontend_url: Base URL of the console, used in the set-password link.
        :param token_ttl: Lifetime of the set-password token.
        :param compensate_identity: Delete the external account when the
            local transaction fails after it was created.
        :param ctx: Optional request-scoped context.
        """
        super().__init__(ctx=ctx)
        self.identity = identity
        self.email_sender = email_sender
        self.frontend_url = frontend_url.rstrip("/")
        self.token_ttl = token_ttl
        self.compensate_identity = compensate_identity

    def register(self, dto: RegistrationIn) -> RegistrationOut:
        """
        Register a business and its admin user.

        :param dto: Registration input.
        :type dto: :class:`RegistrationIn`
        :returns: Ids of the created business and user.
        :rtype: :class:`RegistrationOut`
        :raises ConflictError: If the email is already registered.
        :raises ValidationFailedError: If the business or user data is malformed.
        """
        email = normalize_email(dto.email)

        with self.ro_uow() as uow_ro:
            if uow_ro.users.exists_by_email(email):
                raise ConflictError("BusinessUser", DUPLICATE_EMAIL_MESSAGE)

        raw_token, token_hash = generate_reset_token()
        external: ExternalUserRef | None = None
        try:
            with self.rw_uow() as uow:
                business = uow.businesses.create(dto.business.as_dict())

                external = self.identity.create_user(
                    email=email,
                    password=generate_temp_password(),
                    display_name=dto.display_name,
                )

                user = uow.users.create(
                    {"email": email, "first_name": dto.first_name, "last_name": dto.last_name},
                    business_id=business.id,
                    firebase_uid=external.uid,
                )

                admin_role = uow.roles.get_or_create_admin_role(business.id)
                uow.roles.assign_to_user(user.id, admin_role.id)

                uow.users.save_reset_token(user.id, token_hash, utcnow() + self.token_ttl)

                result = RegistrationOut(business_id=business.id, user_id=user.id, email=user.email)
        except Exception as exc:
            if external is not None:
                self._compensate(external)
            if isinstance(exc, ValueError):
                raise ValidationFailedError(str(exc), (str(exc),)) from exc
            raise

        log.info(
            "Business registered",
            extra={"event": "registration", "business_id": result.business_id, "user_id": result.user_id},
        )
        self._send_welcome(result, dto, raw_token)
        return result

    # ------------------------------------------------------------------ #
    # Side effects
    # ------------------------------------------------------------------ #

    def _compensate(self, external: ExternalUserRef) -> None:
        if not self.compensate_identity:
            log.warning("Registration rolled back; identity account %s left in place", external.uid)
            return
        try:
            self.identity.delete_user(external.uid)
        except ServiceError as exc:
            log.error(
                "Registration rolled back; failed to delete identity account %s: %s",
                external.uid,
                exc,
            )
        else:
            log.info("Registration rolled back; identity account %s deleted", external.uid)

    def _send_welcome(self, result: RegistrationOut, dto: RegistrationIn, raw_token: str) -> None:
        link = f"{self.frontend_url}/set-password?{urlencode({'token': raw_token})}"
        message = EmailMessage(
            to=result.email,
            subject=WELCOME_SUBJECT,
            template_name=WELCOME_TEMPLATE,
            variables={"user_name": dto.first_name, "reset_link": link},
        )
        try:
            self.email_sender.send(message)
        except Exception:
            log.error(
                "Welcome email to %s failed; registration kept",
                redact_email(result.email),
                exc_info=True,
            )
