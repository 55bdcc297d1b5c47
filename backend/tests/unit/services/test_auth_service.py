# tests/unit/services/test_auth_service.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time

from justping.models import BusinessUser, Role
from justping.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    InvalidCredentialsError,
    NotFoundError,
    TokenInvalidError,
    TokenRevokedError,
    ValidationFailedError,
)
from justping.services._shared.ports import InMemoryTokenBlacklist
from justping.services.auth import AuthService, ChangePasswordIn, LoginIn, LogoutIn, RefreshIn
from justping.services.tokens import AccessTokenRevocation
from tests.factories.role import RoleFactory
from tests.helpers.auth import create_account, token_service


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def store() -> InMemoryTokenBlacklist:
    return InMemoryTokenBlacklist()


@pytest.fixture()
def service(identity, store, db) -> AuthService:
    """AuthService wired to the in-memory identity provider and blacklist."""
    return AuthService(
        identity=identity,
        tokens=token_service(),
        revocation=AccessTokenRevocation(store),
    )


@pytest.fixture()
def account(identity):
    return create_account(identity)


def _login(service, account):
    return service.login(LoginIn(email=account.email, password=account.password))


# -------------------------------- Login ----------------------------------- #
def test_login_returns_profile_and_tokens(service, account):
    out = service.login(LoginIn(email=account.email.upper(), password=account.password))

    data = out.as_dict()
    assert data["user"]["id"] == account.user_id
    assert data["user"]["businessId"] == account.business_id
    assert data["user"]["status"] == "active"
    assert [r["name"] for r in data["user"]["roles"]] == ["Admin"]
    assert data["user"]["permissions"]["users"]["delete"] is True
    assert data["expires_in"] == 3600

    claims = service.tokens.verify_access(out.tokens.access_token)
    assert claims["userId"] == account.user_id
    assert claims["permissions"] == data["user"]["permissions"]


@pytest.mark.parametrize("email_override, password", [(None, "Wr0ng!pass"), ("ghost@example.com", "x")])
def test_login_rejections_are_indistinguishable(service, account, email_override, password):
    with pytest.raises(InvalidCredentialsError) as excinfo:
        service.login(LoginIn(email=email_override or account.email, password=password))
    assert str(excinfo.value) == "Invalid credentials"


def test_login_without_local_user_is_rejected(service, identity):
    identity.create_user(email="orphan@example.com", password="P4ss!word", display_name="Orphan")
    with pytest.raises(InvalidCredentialsError):
        service.login(LoginIn(email="orphan@example.com", password="P4ss!word"))


def test_login_disabled_identity_account(service, identity, account):
    identity.disable(account.email)
    with pytest.raises(InvalidCredentialsError):
        _login(service, account)


def test_login_inactive_account_is_forbidden(service, identity):
    suspended = create_account(identity, status="suspended")
    with pytest.raises(AuthorizationError, match="Account is not active"):
        _login(service, suspended)


def test_login_permissions_or_merge_roles(service, identity, session):
    viewer = RoleFactory(permissions={"contacts": {"read": True, "delete": False}})
    editor = RoleFactory(business=viewer.business, permissions={"contacts": {"delete": True}})
    acct = create_account(identity, business=viewer.business, roles=[viewer, editor])

    out = _login(service, acct)

    assert out.profile.permissions == {"contacts": {"read": True, "delete": True}}


# ------------------------------- Refresh ---------------------------------- #
def test_refresh_issues_new_pair_with_current_roles(service, account, session):
    pair = _login(service, account).tokens

    role = session.get(BusinessUser, account.user_id).roles[0]
    role.permissions = {"contacts": {"read": True}}
    session.commit()

    refreshed = service.refresh(RefreshIn(refresh_token=pair.refresh_token))

    claims = service.tokens.verify_access(refreshed.access_token)
    assert claims["permissions"] == {"contacts": {"read": True}}
    # the old refresh token stays valid until the version changes
    service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_refresh_rejects_access_token(service, account):
    pair = _login(service, account).tokens
    with pytest.raises(TokenInvalidError, match="Invalid token type"):
        service.refresh(RefreshIn(refresh_token=pair.access_token))


def test_refresh_rejects_garbage(service):
    with pytest.raises(TokenInvalidError, match="Invalid refresh token"):
        service.refresh(RefreshIn(refresh_token="garbage"))


def test_refresh_rejects_expired_token(service, account):
    with freeze_time(datetime.now(UTC) - timedelta(days=8)):
        pair = _login(service, account).tokens
    with pytest.raises(TokenInvalidError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_refresh_after_version_bump_is_revoked(service, account, session):
    pair = _login(service, account).tokens
    user = session.get(BusinessUser, account.user_id)
    user.token_version += 1
    session.commit()

    with pytest.raises(TokenRevokedError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_refresh_for_deleted_user(service, account, session):
    pair = _login(service, account).tokens
    session.delete(session.get(BusinessUser, account.user_id))
    session.commit()

    with pytest.raises(AuthenticationError, match="User not found"):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_refresh_for_suspended_user(service, account, session):
    pair = _login(service, account).tokens
    session.get(BusinessUser, account.user_id).status = "suspended"
    session.commit()

    with pytest.raises(AuthorizationError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


# -------------------------------- Logout ---------------------------------- #
def test_logout_blacklists_access_token(service, store, account):
    pair = _login(service, account).tokens

    service.logout(LogoutIn(token=pair.access_token))

    assert store.contains(pair.access_token) is True
    # refresh tokens survive a single-session logout
    service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_logout_all_sessions_retires_refresh_tokens(service, store, account, session):
    pair = _login(service, account).tokens

    service.logout(LogoutIn(token=pair.access_token, all_sessions=True))

    assert session.get(BusinessUser, account.user_id).token_version == 1
    with pytest.raises(TokenRevokedError):
        service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_logout_accepts_expired_access_token(service, store, account):
    with freeze_time(datetime.now(UTC) - timedelta(hours=2)):
        pair = _login(service, account).tokens

    service.logout(LogoutIn(token=pair.access_token))

    assert store.contains(pair.access_token) is True


def test_logout_rejects_forged_token(service):
    with pytest.raises(TokenInvalidError):
        service.logout(LogoutIn(token="not.a.jwt"))


# ------------------------------ Current user ------------------------------ #
def test_get_current_user(service, account):
    profile = service.get_current_user(account.user_id)
    data = profile.as_dict()
    assert data["email"] == account.email
    assert "status" not in data
    assert data["roles"][0]["name"] == "Admin"


def test_get_current_user_unknown(service, db):
    with pytest.raises(NotFoundError, match="User not found"):
        service.get_current_user("missing")


# ---------------------------- Change password ----------------------------- #
def test_change_password_rotates_credentials(service, identity, account, session):
    old = _login(service, account).tokens

    new_pair = service.change_password(
        account.user_id,
        ChangePasswordIn(current_password=account.password, new_password="N3w!Secret"),
    )

    assert identity.password_of(account.email) == "N3w!Secret"
    assert session.get(BusinessUser, account.user_id).token_version == 1
    with pytest.raises(TokenRevokedError):
        service.refresh(RefreshIn(refresh_token=old.refresh_token))
    service.refresh(RefreshIn(refresh_token=new_pair.refresh_token))


def test_change_password_wrong_current(service, identity, account):
    with pytest.raises(InvalidCredentialsError, match="Current password is incorrect"):
        service.change_password(
            account.user_id,
            ChangePasswordIn(current_password="Wr0ng!pass", new_password="N3w!Secret"),
        )
    assert identity.password_of(account.email) == account.password


def test_change_password_policy_checked_first(service, identity, account):
    with pytest.raises(ValidationFailedError) as excinfo:
        service.change_password(
            account.user_id,
            ChangePasswordIn(current_password=account.password, new_password="weak"),
        )
    assert len(excinfo.value.errors) == 4
    assert identity.password_of(account.email) == account.password


def test_roles_are_detached_from_session(service, account, session):
    out = _login(service, account)
    session.query(Role).delete()
    session.commit()
    assert out.profile.roles[0].name == "Admin"
