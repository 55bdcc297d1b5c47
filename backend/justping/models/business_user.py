"""BusinessUser model: a console account scoped to exactly one Business."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from justping.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin, as_utc

if TYPE_CHECKING:  # pragma: no cover
    from .business import Business
    from .role import Role

ACTIVE_STATUS = "active"

business_user_role = Table(
    "business_user_role",
    db.metadata,
    Column(
        "user_id",
        String(36),
        ForeignKey("business_user.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_id",
        String(36),
        ForeignKey("role.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


@dataclass(frozen=True, slots=True)
class CredentialState:
    """
    Typed view over the credential bookkeeping of a user.

    :ivar token_version: Monotonic counter; refresh tokens embedding an
        older value are rejected.
    :ivar reset_token_hash: SHA-256 hex digest of the outstanding reset
        token, or ``None``.
    :ivar reset_token_expiry: Aware UTC expiry of that token, or ``None``.
    """

    token_version: int
    reset_token_hash: str | None
    reset_token_expiry: datetime | None


class BusinessUser(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Human account belonging to a single Business.

    The external identity provider owns the password; this row only keeps
    the link (``firebase_uid``) plus credential bookkeeping used by the token
    service.

    Fields
    ------
    business_id : str
        Owning tenant.
    email : str
        Login email, unique, stored lowercased and trimmed.
    firebase_uid : str | None
        External identity reference.
    status : str
        ``"active"`` accounts may log in; anything else is rejected.
    is_password_created : bool
        ``False`` until the user completes the set-password link.
    token_version : int
        Incremented on every credential-invalidating event.
    reset_token : str | None
        SHA-256 hex digest of the outstanding reset token.
    reset_token_expiry : datetime | None
        When ``reset_token`` stops being honored.
    profile : dict
        Free-form attributes stored in the ``metadata`` column.
    """

    __tablename__ = "business_user"

    business_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("business.id", ondelete="CASCADE"), nullable=False
    )
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    firebase_uid: Mapped[str | None] = mapped_column(String(128), nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ACTIVE_STATUS)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_password_created: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_onboarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Credential bookkeeping
    token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reset_token: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reset_token_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # ``metadata`` is reserved on declarative classes
    profile: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )

    business: Mapped[Business] = relationship(back_populates="users")
    roles: Mapped[list[Role]] = relationship(secondary=business_user_role, lazy="selectin")

    __table_args__ = (
        UniqueConstraint("email", name="uq_business_user_email"),
        UniqueConstraint("firebase_uid", name="uq_business_user_firebase_uid"),
        Index("ix_business_user_business_id", "business_id"),
        Index("ix_business_user_reset_token", "reset_token"),
    )

    @property
    def is_active(self) -> bool:
        """``True`` when the account may authenticate."""
        return self.status == ACTIVE_STATUS

    @property
    def display_name(self) -> str:
        """First and last name joined, as sent to the identity provider."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def credential_state(self) -> CredentialState:
        """Snapshot of the credential bookkeeping fields."""
        return CredentialState(
            token_version=int(self.token_version or 0),
            reset_token_hash=self.reset_token,
            reset_token_expiry=as_utc(self.reset_token_expiry),
        )

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v
