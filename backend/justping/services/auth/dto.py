# justping/services/auth/dto.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from justping.models.role import PermissionMap
from justping.services._shared.dto import RoleSnapshot, UserSnapshot, snapshot_roles
from justping.services._shared.policies.permissions import resolve_permissions
from justping.services.tokens.dto import TokenPairOut

if TYPE_CHECKING:  # pragma: no cover
    from justping.models import BusinessUser, Role

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (verified by the identity provider).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param token: Encoded access JWT presented on the request.
    :type token: str
    :param all_sessions: If True, also retire every refresh token of the user.
    :type all_sessions: bool
    """

    token: str
    all_sessions: bool = False


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    """
    Input DTO for an authenticated password change.

    :param current_password: Proof of possession.
    :type current_password: str
    :param new_password: Replacement, checked against the password policy.
    :type new_password: str
    """

    current_password: str
    new_password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserProfileOut:
    """
    A user with the roles they hold and the effective permissions.

    :param user: Detached user.
    :param roles: Held roles, ordered by name.
    :param permissions: OR-aggregate of the roles' permission maps.
    """

    user: UserSnapshot
    roles: tuple[RoleSnapshot, ...]
    permissions: PermissionMap

    @classmethod
    def from_models(cls, user: BusinessUser, roles: Iterable[Role]) -> UserProfileOut:
        roles = list(roles)
        return cls(
            user=UserSnapshot.from_model(user),
            roles=snapshot_roles(roles),
            permissions=resolve_permissions(r.permissions for r in roles),
        )

    def as_dict(self, *, include_status: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.user.id,
            "email": self.user.email,
            "firstName": self.user.first_name,
            "lastName": self.user.last_name,
            "businessId": self.user.business_id,
        }
        if include_status:
            data["status"] = self.user.status
            data["isOnboarded"] = self.user.is_onboarded
        data["roles"] = [r.as_claim() for r in self.roles]
        data["permissions"] = self.permissions
        return data


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Output DTO for login.

    :param profile: Authenticated user view.
    :param tokens: Freshly issued token pair.
    """

    profile: UserProfileOut
    tokens: TokenPairOut

    def as_dict(self) -> dict[str, Any]:
        return {"user": self.profile.as_dict(include_status=True), **self.tokens.as_dict()}
