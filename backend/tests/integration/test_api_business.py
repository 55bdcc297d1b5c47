"""Integration tests for the business profile endpoints."""

from __future__ import annotations

import pytest

from tests.factories.role import RoleFactory
from tests.helpers.auth import bearer, create_account

API = "/api/v1/business"


def _token(client, account) -> str:
    resp = client.post("/api/v1/auth/login", json={"email": account.email, "password": account.password})
    return resp.get_json()["data"]["access_token"]


@pytest.fixture()
def admin(identity, db):
    return create_account(identity)


def test_get_profile(client, admin):
    resp = client.get(f"{API}/profile", headers=bearer(_token(client, admin)))

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["id"] == admin.business_id
    assert set(data) >= {"name", "subscriptionPlan", "status", "contactInfo"}


def test_update_profile(client, admin):
    headers = bearer(_token(client, admin))

    resp = client.put(f"{API}/profile", headers=headers, json={"name": "Renamed", "industry": "food"})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["name"] == "Renamed"
    assert client.get(f"{API}/profile", headers=headers).get_json()["data"]["industry"] == "food"


@pytest.mark.parametrize("payload", [{}, {"subscription_plan": "enterprise"}, {"name": ""}])
def test_update_profile_validation(client, admin, payload):
    resp = client.put(f"{API}/profile", headers=bearer(_token(client, admin)), json=payload)
    assert resp.status_code == 422


def test_missing_permission_is_forbidden(client, identity, db):
    viewer = RoleFactory(name="Viewer", permissions={"business": {"read": True, "update": False}})
    account = create_account(identity, business=viewer.business, roles=[viewer])
    headers = bearer(_token(client, account))

    assert client.get(f"{API}/profile", headers=headers).status_code == 200
    resp = client.put(f"{API}/profile", headers=headers, json={"name": "Nope"})
    assert resp.status_code == 403
    assert resp.get_json()["detail"] == "Access denied: Missing 'business.update' permission"


def test_profile_requires_auth(client):
    assert client.get(f"{API}/profile").status_code == 401
