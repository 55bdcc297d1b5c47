"""Unit tests for token-version and blacklist revocation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from justping.services._shared.errors import (
    ServiceUnavailableError,
    TokenInvalidError,
    TokenRevokedError,
)
from justping.services._shared.ports import InMemoryTokenBlacklist
from justping.services.tokens import AccessTokenRevocation, ensure_current, invalidate_refresh_tokens


class _BrokenStore:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def add(self, token, expires_at):
        raise self.exc

    def contains(self, token):
        raise self.exc

    def purge_expired(self):
        raise self.exc


class _Users:
    def __init__(self) -> None:
        self.version = 0

    def bump_token_version(self, user_id: str) -> int:
        self.version += 1
        return self.version


# ------------------------------ Versioning -------------------------------- #
def test_current_version_passes():
    ensure_current({"tokenVersion": 2}, 2)


def test_stale_version_is_revoked():
    with pytest.raises(TokenRevokedError, match="Token has been revoked"):
        ensure_current({"tokenVersion": 1}, 2)


@pytest.mark.parametrize("claims", [{}, {"tokenVersion": "1"}, {"tokenVersion": True}])
def test_missing_or_malformed_version_is_invalid(claims):
    with pytest.raises(TokenInvalidError):
        ensure_current(claims, 0)


def test_invalidate_bumps_version():
    users = _Users()
    assert invalidate_refresh_tokens(users, "u1") == 1
    assert invalidate_refresh_tokens(users, "u1") == 2


# ------------------------------ Blacklist --------------------------------- #
def test_revoked_token_is_rejected():
    revocation = AccessTokenRevocation(InMemoryTokenBlacklist())
    revocation.ensure_not_revoked("tok")

    revocation.revoke("tok", datetime.now(UTC) + timedelta(hours=1))

    with pytest.raises(TokenRevokedError, match="Token has been invalidated"):
        revocation.ensure_not_revoked("tok")


def test_revoke_accepts_epoch_seconds_and_is_idempotent():
    store = InMemoryTokenBlacklist()
    revocation = AccessTokenRevocation(store)
    exp = int((datetime.now(UTC) + timedelta(hours=1)).timestamp())

    revocation.revoke("tok", exp)
    revocation.revoke("tok", exp)

    assert store.contains("tok") is True


def test_purge_keeps_live_entries():
    store = InMemoryTokenBlacklist()
    now = datetime.now(UTC)
    store.add("old", now - timedelta(seconds=1))
    store.add("live", now + timedelta(hours=1))

    assert AccessTokenRevocation(store).purge_expired() == 1
    assert store.contains("old") is False
    assert store.contains("live") is True


@pytest.mark.parametrize(
    "exc",
    [
        OperationalError("SELECT 1", {}, Exception("db down")),
        RedisConnectionError("redis down"),
        TimeoutError(),
    ],
)
def test_store_failure_fails_closed(exc):
    revocation = AccessTokenRevocation(_BrokenStore(exc))

    with pytest.raises(ServiceUnavailableError):
        revocation.ensure_not_revoked("tok")
    with pytest.raises(ServiceUnavailableError):
        revocation.revoke("tok", datetime.now(UTC))
    with pytest.raises(ServiceUnavailableError):
        revocation.purge_expired()
