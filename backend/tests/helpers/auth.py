"""Helpers creating signed-in users for service and API tests."""

from __future__ import annotations

from dataclasses import dataclass

from justping.infra.jwt import JWTTokenProvider
from justping.services._shared.ports.identity_provider import InMemoryIdentityProvider
from justping.services.tokens import TokenConfig, TokenService
from tests.factories.business_user import BusinessUserFactory
from tests.factories.role import AdminRoleFactory

DEFAULT_PASSWORD = "Str0ng!Passw0rd"


@dataclass
class Account:
    """A persisted user with a matching identity-provider account."""

    user_id: str
    business_id: str
    email: str
    firebase_uid: str
    password: str


def create_account(
    identity: InMemoryIdentityProvider,
    *,
    password: str = DEFAULT_PASSWORD,
    roles=None,
    **user_fields,
) -> Account:
    """Create the identity account first, then the local user linked to it.

    Parameters
    ----------
    identity:
        In-memory provider receiving the account.
    password:
        Password registered with the provider.
    roles:
        Roles to attach. ``None`` attaches a fresh Admin role of the user's
        business; pass ``[]`` for a user without roles.
    """
    email = user_fields.pop("email", None) or BusinessUserFactory.build().email
    ref = identity.create_user(email=email, password=password, display_name="Test User")
    user = BusinessUserFactory(email=email, firebase_uid=ref.uid, **user_fields)
    if roles is None:
        roles = [AdminRoleFactory(business=user.business)]
    if roles:
        user.roles.extend(roles)
        BusinessUserFactory._meta.sqlalchemy_session_factory().commit()
    return Account(
        user_id=user.id,
        business_id=user.business_id,
        email=user.email,
        firebase_uid=ref.uid,
        password=password,
    )


def token_service(access: str = "1h", refresh: str = "7d") -> TokenService:
    """Token service backed by flask-jwt-extended; needs an app context."""
    return TokenService(JWTTokenProvider(), TokenConfig(access_expires_in=access, refresh_expires_in=refresh))


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
