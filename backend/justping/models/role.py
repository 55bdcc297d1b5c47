"""Role model: a named permission map owned by one Business."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import JSON, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from justping.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:  # pragma: no cover
    from .business import Business

ADMIN_ROLE_NAME = "Admin"

# resource -> action -> allowed
PermissionMap = dict[str, dict[str, bool]]


class Role(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Named permission template scoped to a Business.

    ``(business_id, name)`` is unique so the default Admin role can be
    created with an insert-or-reselect instead of check-then-insert.
    """

    __tablename__ = "role"

    business_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("business.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    permissions: Mapped[PermissionMap] = mapped_column(JSON, nullable=False, default=dict)

    business: Mapped[Business] = relationship(back_populates="roles")

    __table_args__ = (UniqueConstraint("business_id", "name", name="uq_role_business_id_name"),)


def _crud(*extra: str) -> dict[str, bool]:
    actions = {"create": True, "read": True, "update": True, "delete": True}
    actions.update({name: True for name in extra})
    return actions


# Full-access template seeded for every new business
ADMIN_PERMISSIONS: PermissionMap = {
    "users": _crud(),
    "roles": _crud(),
    "templates": _crud(),
    "broadcasts": _crud(),
    "campaigns": _crud(),
    "agents": _crud("approve"),
    "contacts": _crud(),
    "business": _crud(),
    "settings": _crud(),
    "channels": _crud(),
    "business_channels": _crud(),
    "integrations": {"manage": True},
}
