"""Pytest fixtures building an isolated application per test.

Each test gets a fresh Flask app wired with the in-memory identity provider
and email outbox, and a brand new in-memory SQLite schema.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event

from justping.core.config import TestingConfig
from justping.core.extensions import (
    EMAIL_SENDER_KEY,
    IDENTITY_PROVIDER_KEY,
    TOKEN_BLACKLIST_KEY,
    db as _db,
)
from justping.factory import create_app


def _enable_sqlite_savepoints(engine) -> None:
    """Let SQLAlchemy own BEGIN on pysqlite so SAVEPOINTs nest correctly."""

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):  # pragma: no cover - driver hook
        conn.exec_driver_sql("BEGIN")


@pytest.fixture()
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied and an
        application context pushed for the duration of the test.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig, instance_relative_config=False)
    application.logger.setLevel("WARNING")
    with application.app_context():
        if _db.engine.dialect.name == "sqlite":
            _enable_sqlite_savepoints(_db.engine)
        yield application


@pytest.fixture()
def db(app):
    """Create every table before the test and drop them afterwards.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()
    _db.engine.dispose()


@pytest.fixture()
def session(db):
    """Return the scoped session used by repositories and factories."""
    return db.session


@pytest.fixture()
def client(app, db):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def identity(app):
    """In-memory identity provider bound to the app."""
    return app.extensions[IDENTITY_PROVIDER_KEY]


@pytest.fixture()
def outbox(app):
    """In-memory email sink bound to the app."""
    return app.extensions[EMAIL_SENDER_KEY]


@pytest.fixture()
def blacklist(app):
    """Token blacklist bound to the app (database backend under testing)."""
    return app.extensions[TOKEN_BLACKLIST_KEY]


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to the test session -----------------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper when the test uses the database."""
    from tests.factories import SQLAlchemySession

    if "db" in request.fixturenames or "session" in request.fixturenames or "client" in request.fixturenames:
        SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
