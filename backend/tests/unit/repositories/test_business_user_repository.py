"""Unit tests for the credential store (BusinessUserRepository)."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from justping.repositories import BusinessUserRepository
from justping.repositories.business_user import normalize_email
from justping.services._shared.errors import ConflictError
from tests.factories.business import BusinessFactory
from tests.factories.business_user import BusinessUserFactory


@pytest.fixture()
def repo(session) -> BusinessUserRepository:
    return BusinessUserRepository(session=session)


def test_normalize_email():
    assert normalize_email("  Mixed@Case.COM ") == "mixed@case.com"


def test_create_sets_defaults(repo, session):
    business = BusinessFactory()
    user = repo.create(
        {"email": " New@Example.com", "first_name": "N", "last_name": "U"},
        business_id=business.id,
        firebase_uid="uid-new",
    )
    session.commit()

    assert user.email == "new@example.com"
    assert user.status == "active"
    assert user.is_password_created is False
    assert user.token_version == 0
    assert user.credential_state.reset_token_hash is None


def test_create_duplicate_email_is_conflict(repo, session):
    existing = BusinessUserFactory(email="dup@example.com")
    with pytest.raises(ConflictError):
        repo.create(
            {"email": "DUP@example.com"}, business_id=existing.business_id, firebase_uid="uid-other"
        )
    # the outer transaction is still usable
    assert repo.exists_by_email("dup@example.com") is True


def test_lookups(repo):
    user = BusinessUserFactory(email="find@example.com", firebase_uid="uid-find")
    assert repo.get_by_email("FIND@example.com").id == user.id
    assert repo.get_by_firebase_uid("uid-find").id == user.id
    assert repo.get_by_email("nobody@example.com") is None
    assert repo.exists_by_email("nobody@example.com") is False


def test_validate_business_access(repo):
    user = BusinessUserFactory()
    other = BusinessFactory()
    assert repo.validate_business_access(user.id, user.business_id) is True
    assert repo.validate_business_access(user.id, other.id) is False
    assert repo.validate_business_access("missing", user.business_id) is False


def test_reset_token_lookup_honours_expiry(repo, session):
    user = BusinessUserFactory()
    now = datetime.now(UTC)
    repo.save_reset_token(user.id, "a" * 64, now + timedelta(minutes=30))
    session.commit()

    assert repo.find_by_reset_token("a" * 64).id == user.id
    assert repo.find_by_reset_token("a" * 64, now=now + timedelta(hours=1)) is None
    assert repo.find_by_reset_token("b" * 64) is None


def test_complete_password_reset(repo, session):
    user = BusinessUserFactory(is_password_created=False, token_version=2)
    repo.save_reset_token(user.id, "c" * 64, datetime.now(UTC) + timedelta(hours=1))

    assert repo.complete_password_reset(user.id) == 3
    session.commit()
    session.refresh(user)

    assert user.is_password_created is True
    # a token issued after the redeemed one is left in place
    assert user.reset_token == "c" * 64


def test_consume_reset_token_succeeds_once(repo, session):
    user = BusinessUserFactory()
    repo.save_reset_token(user.id, "d" * 64, datetime.now(UTC) + timedelta(hours=1))
    session.commit()

    assert repo.consume_reset_token(user.id, "d" * 64) is True
    assert repo.consume_reset_token(user.id, "d" * 64) is False
    session.commit()
    session.refresh(user)
    assert user.reset_token is None
    assert user.reset_token_expiry is None


def test_consume_reset_token_rejects_wrong_or_expired(repo, session):
    user = BusinessUserFactory()
    now = datetime.now(UTC)
    repo.save_reset_token(user.id, "e" * 64, now + timedelta(minutes=5))
    session.commit()

    assert repo.consume_reset_token(user.id, "f" * 64) is False
    assert repo.consume_reset_token(user.id, "e" * 64, now=now + timedelta(minutes=6)) is False
    assert repo.consume_reset_token(user.id, "e" * 64, now=now) is True


def test_restore_reset_token_skips_when_newer_token_exists(repo, session):
    user = BusinessUserFactory()
    expiry = datetime.now(UTC) + timedelta(hours=1)
    repo.save_reset_token(user.id, "1" * 64, expiry)
    assert repo.consume_reset_token(user.id, "1" * 64) is True

    assert repo.restore_reset_token(user.id, "1" * 64, expiry) is True
    repo.save_reset_token(user.id, "2" * 64, expiry)
    assert repo.restore_reset_token(user.id, "1" * 64, expiry) is False
    session.commit()
    session.refresh(user)
    assert user.reset_token == "2" * 64


def test_bump_token_version_is_monotonic(repo, session):
    user = BusinessUserFactory()
    assert repo.get_token_version(user.id) == 0
    assert repo.bump_token_version(user.id) == 1
    assert repo.bump_token_version(user.id) == 2
