"""
Unit tests for FirebaseIdentityProvider.

The REST sign-in call is mocked with ``responses``; Admin SDK calls are
replaced with ``monkeypatch`` so no Google credentials are needed.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests
import responses
from responses import matchers
from firebase_admin import auth as fb_auth

from justping.infra.firebase.firebase_identity_provider import (
    SIGN_IN_URL,
    FirebaseIdentityProvider,
)
from justping.services._shared.errors import (
    ConflictError,
    IdentityProviderError,
    InvalidCredentialsError,
    NotFoundError,
    TokenInvalidError,
)


@pytest.fixture()
def provider() -> FirebaseIdentityProvider:
    p = FirebaseIdentityProvider(api_key="test-key", timeout=3)
    p._app = SimpleNamespace(name="justping")  # skip SDK bootstrap
    return p


# ------------------------------ REST sign-in ------------------------------ #
@responses.activate
def test_authenticate_success(provider):
    responses.post(
        SIGN_IN_URL,
        json={"localId": "uid-1", "email": "a@example.com", "idToken": "eyJ.id.token"},
        match=[
            matchers.query_param_matcher({"key": "test-key"}),
            matchers.json_params_matcher(
                {"email": "a@example.com", "password": "pw", "returnSecureToken": True}
            ),
        ],
    )

    result = provider.authenticate("a@example.com", "pw")

    assert result.uid == "uid-1"
    assert result.id_token == "eyJ.id.token"


@responses.activate
@pytest.mark.parametrize(
    "code",
    ["INVALID_PASSWORD", "EMAIL_NOT_FOUND", "INVALID_LOGIN_CREDENTIALS", "USER_DISABLED",
     "TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled"],
)
def test_authenticate_rejected_credentials(provider, code):
    responses.post(SIGN_IN_URL, status=400, json={"error": {"code": 400, "message": code}})
    with pytest.raises(InvalidCredentialsError):
        provider.authenticate("a@example.com", "bad")


@responses.activate
def test_authenticate_unexpected_error(provider):
    responses.post(SIGN_IN_URL, status=500, body="upstream exploded")
    with pytest.raises(IdentityProviderError):
        provider.authenticate("a@example.com", "pw")


@responses.activate
def test_authenticate_network_failure(provider):
    responses.post(SIGN_IN_URL, body=requests.ConnectTimeout("slow"))
    with pytest.raises(IdentityProviderError):
        provider.authenticate("a@example.com", "pw")


def test_authenticate_requires_api_key():
    p = FirebaseIdentityProvider(api_key="")
    with pytest.raises(IdentityProviderError):
        p.authenticate("a@example.com", "pw")


# -------------------------------- Admin SDK ------------------------------- #
def test_create_user_maps_record(provider, monkeypatch):
    calls = {}

    def _create_user(**kwargs):
        calls.update(kwargs)
        return SimpleNamespace(uid="uid-9", email=kwargs["email"])

    monkeypatch.setattr(fb_auth, "create_user", _create_user)

    ref = provider.create_user(email="a@example.com", password="tmp", display_name="Ada L")

    assert ref.uid == "uid-9"
    assert calls["display_name"] == "Ada L"
    assert calls["app"] is provider._app


def test_create_user_duplicate_is_conflict(provider, monkeypatch):
    def _raise(**kwargs):
        raise fb_auth.EmailAlreadyExistsError("exists", None, None)

    monkeypatch.setattr(fb_auth, "create_user", _raise)
    with pytest.raises(ConflictError):
        provider.create_user(email="a@example.com", password="tmp", display_name="")


def test_update_password_unknown_user(provider, monkeypatch):
    def _raise(uid, **kwargs):
        raise fb_auth.UserNotFoundError("missing")

    monkeypatch.setattr(fb_auth, "update_user", _raise)
    with pytest.raises(NotFoundError):
        provider.update_password("uid-x", "N3w!Secret")


def test_delete_user_calls_sdk(provider, monkeypatch):
    deleted = []
    monkeypatch.setattr(fb_auth, "delete_user", lambda uid, app=None: deleted.append(uid))
    provider.delete_user("uid-1")
    assert deleted == ["uid-1"]


def test_verify_id_token_rejects_non_jwt_without_calling_sdk(provider, monkeypatch):
    def _fail(*args, **kwargs):  # pragma: no cover - must not be reached
        raise AssertionError("SDK should not be called")

    monkeypatch.setattr(fb_auth, "verify_id_token", _fail)
    with pytest.raises(TokenInvalidError):
        provider.verify_id_token("plain-string")


def test_verify_id_token_maps_sdk_errors(provider, monkeypatch):
    def _raise(token, app=None):
        raise fb_auth.InvalidIdTokenError("bad token")

    monkeypatch.setattr(fb_auth, "verify_id_token", _raise)
    with pytest.raises(TokenInvalidError):
        provider.verify_id_token("eyJhbGciOi.fake.token")


def test_verify_id_token_returns_claims(provider, monkeypatch):
    monkeypatch.setattr(
        fb_auth, "verify_id_token", lambda token, app=None: {"uid": "uid-1", "email": "a@example.com"}
    )
    assert provider.verify_id_token("eyJ.valid.token")["uid"] == "uid-1"


def test_from_config_reads_settings():
    p = FirebaseIdentityProvider.from_config(
        {"FIREBASE_API_KEY": "k", "FIREBASE_PROJECT_ID": "proj", "IDENTITY_PROVIDER_TIMEOUT": 4}
    )
    assert (p.api_key, p.project_id, p.timeout) == ("k", "proj", 4)
