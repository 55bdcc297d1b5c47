"""BusinessUser repository: lookups and credential bookkeeping writes."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, cast

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from justping.models.base import utcnow
from justping.models.business_user import BusinessUser
from justping.repositories.base import BaseRepository
from justping.services._shared.errors import ConflictError


def normalize_email(email: str) -> str:
    """Lowercase and trim an email the same way the model validator does."""
    return email.strip().lower()


class BusinessUserRepository(BaseRepository[BusinessUser]):
    """Persistence-only repository for :class:`BusinessUser`.

    It never talks to the identity provider and never signs tokens: it only
    reads users and applies single-statement writes to the credential
    columns (``token_version``, ``reset_token``, ``reset_token_expiry``).
    """

    model = BusinessUser

    # ---------------------------- Whitelists ----------------------------

    def _updatable_fields(self):
        return {"first_name", "last_name", "status", "email_verified", "is_onboarded"}

    def _default_eagerload(self, stmt):
        return stmt.options(selectinload(BusinessUser.roles))

    # ---------------------------- Creation ----------------------------

    def create(
        self,
        data: Mapping[str, Any],
        *,
        business_id: str,
        firebase_uid: str | None,
    ) -> BusinessUser:
        """
        Insert a user with ``status="active"``, unverified email, no password
        created yet and ``token_version=0``.

        The insert runs inside a SAVEPOINT so a duplicate email surfaces as
        :class:`ConflictError` without poisoning the outer transaction.

        :param data: ``email``, ``first_name``, ``last_name``.
        :param business_id: Owning business id.
        :param firebase_uid: External identity reference.
        :returns: Flushed user.
        :raises ConflictError: If the email is already registered.
        """
        user = BusinessUser(
            business_id=business_id,
            email=data["email"],
            firebase_uid=firebase_uid,
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            status="active",
            email_verified=False,
            is_password_created=False,
            token_version=0,
        )
        try:
            with self.session.begin_nested():
                self.session.add(user)
                self.session.flush()
        except IntegrityError as exc:
            raise ConflictError("BusinessUser", "Business already exists with this email") from exc
        return user

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> BusinessUser | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :returns: User instance or ``None`` when not found.
        """
        stmt = select(BusinessUser).where(BusinessUser.email == normalize_email(email))
        stmt = self._default_eagerload(stmt)
        return cast(BusinessUser | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(BusinessUser.id).where(BusinessUser.email == normalize_email(email))
        return self.session.execute(stmt).first() is not None

    def get_by_firebase_uid(self, firebase_uid: str) -> BusinessUser | None:
        """Fetch the local user linked to an external identity."""
        stmt = self._default_eagerload(
            select(BusinessUser).where(BusinessUser.firebase_uid == firebase_uid)
        )
        return cast(BusinessUser | None, self.session.execute(stmt).scalars().first())

    def find_by_reset_token(
        self, token_hash: str, *, now: datetime | None = None
    ) -> BusinessUser | None:
        """
        Find the user holding an unexpired reset token with this hash.

        :param token_hash: SHA-256 hex digest of the raw token.
        :param now: Reference time; defaults to the current UTC time.
        :returns: Matching user, or ``None`` if unknown or expired.
        """
        moment = now or utcnow()
        stmt = self._default_eagerload(
            select(BusinessUser).where(
                BusinessUser.reset_token == token_hash,
                BusinessUser.reset_token_expiry.is_not(None),
                BusinessUser.reset_token_expiry > moment,
            )
        )
        return cast(BusinessUser | None, self.session.execute(stmt).scalars().first())

    def validate_business_access(self, user_id: str, business_id: str) -> bool:
        """Return ``True`` when the user belongs to the given business."""
        stmt = select(BusinessUser.id).where(
            BusinessUser.id == user_id, BusinessUser.business_id == business_id
        )
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Credential writes ----------------------------

    def save_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        """Store the hash and expiry of a freshly generated reset token."""
        self.session.execute(
            update(BusinessUser)
            .where(BusinessUser.id == user_id)
            .values(reset_token=token_hash, reset_token_expiry=expires_at)
        )

    def consume_reset_token(self, user_id: str, token_hash: str, *, now: datetime | None = None) -> bool:
        """
        Clear the reset token only if it is still the one presented and unexpired.

        The check and the clear are one conditional ``UPDATE``; of any number
        of concurrent redemptions exactly one sees a matched row.

        :returns: ``True`` when this call consumed the token.
        """
        result = self.session.execute(
            update(BusinessUser)
            .where(
                BusinessUser.id == user_id,
                BusinessUser.reset_token == token_hash,
                BusinessUser.reset_token_expiry > (now or utcnow()),
            )
            .values(reset_token=None, reset_token_expiry=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def restore_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> bool:
        """
        Put a consumed token back after the password change failed downstream.

        Skipped when another token was issued in the meantime.

        :returns: ``True`` when the token was restored.
        """
        result = self.session.execute(
            update(BusinessUser)
            .where(BusinessUser.id == user_id, BusinessUser.reset_token.is_(None))
            .values(reset_token=token_hash, reset_token_expiry=expires_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def complete_password_reset(self, user_id: str) -> int:
        """
        Mark the password as created and bump the token version, in one
        statement.

        Token columns are left alone so a reset token issued after the
        redeemed one stays valid.

        :returns: New token version.
        """
        self.session.execute(
            update(BusinessUser)
            .where(BusinessUser.id == user_id)
            .values(
                is_password_created=True,
                token_version=BusinessUser.token_version + 1,
            )
        )
        return self.get_token_version(user_id)

    def get_token_version(self, user_id: str) -> int:
        """Return the current ``token_version`` for the given user."""
        stmt = select(BusinessUser.token_version).where(BusinessUser.id == user_id)
        return int(self.session.execute(stmt).scalar_one())

    def bump_token_version(self, user_id: str) -> int:
        """
        Atomically increment ``token_version``.

        The increment is computed by the database (``SET token_version =
        token_version + 1``) so two racing writers both land.

        :returns: New token_version after increment.
        """
        self.session.execute(
            update(BusinessUser)
            .where(BusinessUser.id == user_id)
            .values(token_version=BusinessUser.token_version + 1)
        )
        return self.get_token_version(user_id)
