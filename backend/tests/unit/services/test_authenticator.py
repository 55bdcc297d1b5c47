"""Unit tests for RequestAuthenticator and AuthContext guards."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time

from justping.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenRevokedError,
)
from justping.services._shared.ports import InMemoryTokenBlacklist
from justping.services.auth import AuthService, LoginIn, RequestAuthenticator
from justping.services.tokens import AccessTokenRevocation
from tests.factories.role import RoleFactory
from tests.helpers.auth import create_account, token_service


@pytest.fixture()
def revocation() -> AccessTokenRevocation:
    return AccessTokenRevocation(InMemoryTokenBlacklist())


@pytest.fixture()
def authenticator(identity, revocation, db) -> RequestAuthenticator:
    return RequestAuthenticator(tokens=token_service(), revocation=revocation, identity=identity)


@pytest.fixture()
def account(identity):
    return create_account(identity)


def _access_token(identity, revocation, account) -> str:
    service = AuthService(identity=identity, tokens=token_service(), revocation=revocation)
    return service.login(LoginIn(email=account.email, password=account.password)).tokens.access_token


@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "Bearer Firebase "])
def test_missing_or_malformed_header(authenticator, header):
    with pytest.raises(AuthenticationError, match="Authentication token required"):
        authenticator.authenticate(header)


def test_access_token_yields_context(authenticator, identity, revocation, account):
    token = _access_token(identity, revocation, account)

    ctx = authenticator.authenticate(f"Bearer {token}")

    assert ctx.user_id == account.user_id
    assert ctx.business_id == account.business_id
    assert ctx.email == account.email
    assert ctx.token == token
    assert ctx.via_identity_provider is False
    ctx.require_permission("users.read")
    ctx.require_role("Admin")


def test_blacklisted_token_is_rejected(authenticator, identity, revocation, account):
    token = _access_token(identity, revocation, account)
    revocation.revoke(token, datetime.now(UTC) + timedelta(hours=1))

    with pytest.raises(TokenRevokedError, match="Token has been invalidated"):
        authenticator.authenticate(f"Bearer {token}")


def test_expired_token_is_rejected(authenticator, identity, revocation, account):
    with freeze_time(datetime.now(UTC) - timedelta(hours=2)):
        token = _access_token(identity, revocation, account)
    with pytest.raises(TokenExpiredError):
        authenticator.authenticate(f"Bearer {token}")


def test_refresh_token_cannot_authenticate(authenticator, identity, revocation, account):
    service = AuthService(identity=identity, tokens=token_service(), revocation=revocation)
    pair = service.login(LoginIn(email=account.email, password=account.password)).tokens
    with pytest.raises(TokenInvalidError):
        authenticator.authenticate(f"Bearer {pair.refresh_token}")


def test_firebase_id_token_path(authenticator, identity, account):
    id_token = identity.issue_id_token(account.firebase_uid)

    ctx = authenticator.authenticate(f"Bearer Firebase {id_token}")

    assert ctx.user_id == account.user_id
    assert ctx.firebase_uid == account.firebase_uid
    assert ctx.via_identity_provider is True
    assert ctx.permissions["business"]["update"] is True
    assert [r["name"] for r in ctx.roles] == ["Admin"]


def test_firebase_token_for_unknown_user(authenticator, identity, db):
    ref = identity.create_user(email="stranger@example.com", password="P4ss!word", display_name="S")
    id_token = identity.issue_id_token(ref.uid)
    with pytest.raises(AuthenticationError, match="User not found in system"):
        authenticator.authenticate(f"Bearer Firebase {id_token}")


def test_invalid_firebase_token(authenticator):
    with pytest.raises(TokenInvalidError):
        authenticator.authenticate("Bearer Firebase idt-unknown")


def test_guards_reject_missing_grants(authenticator, identity, revocation):
    viewer = RoleFactory(name="Viewer", permissions={"contacts": {"read": True, "delete": False}})
    acct = create_account(identity, business=viewer.business, roles=[viewer])
    ctx = authenticator.authenticate(f"Bearer {_access_token(identity, revocation, acct)}")

    ctx.require_permission("contacts.read")
    ctx.require_role("Viewer")
    with pytest.raises(AuthorizationError, match="Access denied: Missing 'contacts.delete' permission"):
        ctx.require_permission("contacts.delete")
    with pytest.raises(AuthorizationError, match="Access denied: Missing 'Admin' role"):
        ctx.require_role("Admin")
