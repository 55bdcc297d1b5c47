from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from justping.models import Business


@dataclass(frozen=True, slots=True)
class BusinessProfileOut:
    """Tenant profile as shown in the console settings page."""

    id: str
    name: str
    description: str | None
    website: str | None
    industry: str | None
    subscription_plan: str
    status: str
    contact_info: dict[str, Any]

    @classmethod
    def from_model(cls, business: Business) -> BusinessProfileOut:
        return cls(
            id=business.id,
            name=business.name,
            description=business.description,
            website=business.website,
            industry=business.industry,
            subscription_plan=business.subscription_plan,
            status=business.status,
            contact_info=dict(business.contact_info or {}),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "website": self.website,
            "industry": self.industry,
            "subscriptionPlan": self.subscription_plan,
            "status": self.status,
            "contactInfo": self.contact_info,
        }
