"""
DTOs for RegistrationService.

Contracts for the sign-up flow that creates a ``Business`` together with its
first ``BusinessUser`` (the Admin) in one transaction.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class BusinessProfileIn:
    """
    Tenant attributes supplied at sign-up.

    :param name: Business display name.
    :type name: str
    :param description: Optional description.
    :type description: str | None
    :param website: Optional website URL.
    :type website: str | None
    :param industry: Optional industry label.
    :type industry: str | None
    :param contact_info: Structured contact details.
    :type contact_info: dict[str, Any]
    """

    name: str
    description: str | None = None
    website: str | None = None
    industry: str | None = None
    contact_info: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class RegistrationIn:
    """
    Input payload for the registration process.

    :param business: Tenant attributes.
    :type business: :class:`BusinessProfileIn`
    :param email: Admin login email (normalized to lowercase+trim).
    :type email: str
    :param first_name: Admin given name.
    :type first_name: str
    :param last_name: Admin family name.
    :type last_name: str
    """

    business: BusinessProfileIn
    email: str
    first_name: str
    last_name: str

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# --------------------------------------------------------------------------- #
# Output
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegistrationOut:
    """
    Output summary for the registration process.

    :param business_id: Created business id.
    :type business_id: str
    :param user_id: Created admin user id.
    :type user_id: str
    :param email: Normalized admin email.
    :type email: str
    """

    business_id: str
    user_id: str
    email: str
