# justping/services/_shared/dto.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from justping.models import BusinessUser, Role


@dataclass(frozen=True, slots=True)
class RoleSnapshot:
    """
    Detached view of a role as embedded in tokens and API responses.

    :param id: Role id.
    :type id: str
    :param name: Role name, e.g. ``"Admin"``.
    :type name: str
    :param description: Optional description.
    :type description: str | None
    """

    id: str
    name: str
    description: str | None = None

    @classmethod
    def from_model(cls, role: Role) -> RoleSnapshot:
        return cls(id=role.id, name=role.name, description=role.description)

    def as_claim(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description}


@dataclass(frozen=True, slots=True)
class UserSnapshot:
    """
    Detached view of a business user, safe to use after the UoW closes.

    :param id: User id.
    :param business_id: Owning business id.
    :param email: Normalized email.
    :param firebase_uid: External identity reference.
    :param first_name: Given name.
    :param last_name: Family name.
    :param status: Account status.
    :param is_onboarded: Onboarding flag surfaced to the console.
    :param token_version: Version embedded in refresh tokens.
    """

    id: str
    business_id: str
    email: str
    firebase_uid: str | None
    first_name: str
    last_name: str
    status: str
    is_onboarded: bool
    token_version: int

    @classmethod
    def from_model(cls, user: BusinessUser) -> UserSnapshot:
        return cls(
            id=user.id,
            business_id=user.business_id,
            email=user.email,
            firebase_uid=user.firebase_uid,
            first_name=user.first_name,
            last_name=user.last_name,
            status=user.status,
            is_onboarded=bool(user.is_onboarded),
            token_version=int(user.token_version or 0),
        )

    @property
    def is_active(self) -> bool:
        from justping.models.business_user import ACTIVE_STATUS

        return self.status == ACTIVE_STATUS


def snapshot_roles(roles: Iterable[Role]) -> tuple[RoleSnapshot, ...]:
    """Detach a collection of ORM roles."""
    return tuple(RoleSnapshot.from_model(r) for r in roles)
