"""Business repository."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from justping.models.business import Business
from justping.repositories.base import BaseRepository


class BusinessRepository(BaseRepository[Business]):
    """Persistence-only repository for :class:`Business`."""

    model = Business

    def _updatable_fields(self):
        """Profile fields a tenant may edit (plan and status stay server-managed)."""
        return {"name", "description", "website", "industry", "contact_info"}

    def create(self, data: Mapping[str, Any]) -> Business:
        """
        Insert a business, letting the model apply plan/status defaults.

        :param data: ``name`` plus optional ``description``, ``website``,
            ``industry`` and ``contact_info``.
        :type data: Mapping[str, Any]
        :returns: Flushed business with its id assigned.
        :rtype: Business
        :raises ValueError: If ``name`` is blank (model validator).
        """
        business = Business(
            name=data["name"],
            description=data.get("description"),
            website=data.get("website"),
            industry=data.get("industry"),
            contact_info=dict(data.get("contact_info") or {}),
        )
        return self.add(business)
