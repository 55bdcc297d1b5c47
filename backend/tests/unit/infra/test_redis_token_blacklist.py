# tests/unit/infra/test_redis_token_blacklist.py
"""
Unit tests for RedisTokenBlacklist using fakeredis.

They run entirely in-memory and cover add/contains, TTL derivation from the
token's own expiry, idempotency and the no-op purge.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from justping.infra.redis.redis_token_blacklist import RedisTokenBlacklist
from justping.repositories.token_blacklist import token_digest


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisTokenBlacklist(r=fake_redis)


def _future(seconds: int = 300) -> datetime:
    return datetime.now(UTC) + timedelta(seconds=seconds)


def test_add_then_contains(store):
    assert store.contains("tok-a") is False
    store.add("tok-a", _future())
    assert store.contains("tok-a") is True
    assert store.contains("tok-b") is False


def test_key_is_token_digest_with_ttl(store, fake_redis):
    store.add("tok-a", _future(600))

    key = f"blacklist:at:{token_digest('tok-a')}"
    assert fake_redis.exists(key) == 1
    assert 590 <= fake_redis.ttl(key) <= 600
    # the raw token never appears in the keyspace
    assert all(b"tok-a" not in k for k in fake_redis.keys("*"))


def test_already_expired_token_gets_minimal_ttl(store, fake_redis):
    store.add("tok-old", datetime.now(UTC) - timedelta(minutes=5))
    assert fake_redis.ttl(f"blacklist:at:{token_digest('tok-old')}") == 1


def test_add_is_idempotent(store, fake_redis):
    store.add("tok-a", _future(600))
    store.add("tok-a", _future(30))
    # first write wins
    assert fake_redis.ttl(f"blacklist:at:{token_digest('tok-a')}") > 30


def test_purge_is_a_noop(store):
    store.add("tok-a", _future())
    assert store.purge_expired() == 0
    assert store.contains("tok-a") is True
