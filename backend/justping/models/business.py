"""Business (tenant) model."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from justping.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:  # pragma: no cover
    from .business_user import BusinessUser
    from .role import Role

DEFAULT_SUBSCRIPTION_PLAN = "free"
DEFAULT_BUSINESS_STATUS = "active"


class Business(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Tenant owning users, roles and every other piece of console data.

    Fields
    ------
    name : str
        Display name, required.
    description, website, industry : str | None
        Optional profile attributes editable by the tenant.
    subscription_plan : str
        Billing plan, ``"free"`` on creation.
    status : str
        ``"active"`` on creation. Businesses are never hard-deleted.
    contact_info : dict
        Structured contact details (``phone``, ``address``).
    """

    __tablename__ = "business"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    subscription_plan: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_SUBSCRIPTION_PLAN
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=DEFAULT_BUSINESS_STATUS)
    contact_info: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    users: Mapped[list[BusinessUser]] = relationship(back_populates="business")
    roles: Mapped[list[Role]] = relationship(back_populates="business")

    @validates("name")
    def _validate_name(self, key: str, value: str) -> str:
        """
        Reject blank business names.

        :raises ValueError: If the name is empty after trimming.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Business name is required.")
        return value.strip()
