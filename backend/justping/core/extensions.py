"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from typing import Any, cast

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address, default_limits=[])
redis_client: redis.Redis | None = None

# Keys under ``app.extensions`` holding the auth-core adapters
IDENTITY_PROVIDER_KEY = "justping.identity_provider"
EMAIL_SENDER_KEY = "justping.email_sender"
TOKEN_BLACKLIST_KEY = "justping.token_blacklist"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, JWT, rate limiting and the auth-core adapters.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`justping.models` package so SQLAlchemy metadata is complete
        before ``create_all`` or any query runs.
    """
    _apply_engine_options(app)
    db.init_app(app)

    from justping import models as _models  # noqa: F401

    jwt.init_app(app)
    limiter.init_app(app)

    _init_redis(app)
    _init_adapters(app)


def _apply_engine_options(app: Flask) -> None:
    """Bound every statement on PostgreSQL so a stuck query rolls the request back."""
    uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
    timeout_ms = int(app.config.get("DB_STATEMENT_TIMEOUT_MS", 0) or 0)
    if not uri.startswith("postgresql") or timeout_ms <= 0:
        return
    options = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    connect_args = dict(options.get("connect_args") or {})
    connect_args.setdefault("options", f"-c statement_timeout={timeout_ms}")
    options["connect_args"] = connect_args
    options.setdefault("pool_pre_ping", True)
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = options


def _init_redis(app: Flask) -> None:
    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    redis_client = redis.Redis.from_url(redis_url)
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client


def _init_adapters(app: Flask) -> None:
    """Build the identity provider, email sink and blacklist selected by config."""
    from justping.infra.email import build_email_sender
    from justping.services._shared.ports.identity_provider import InMemoryIdentityProvider

    provider_name = str(app.config.get("IDENTITY_PROVIDER", "firebase")).lower()
    if provider_name == "firebase":
        from justping.infra.firebase.firebase_identity_provider import (
            FirebaseIdentityProvider,
        )

        app.extensions[IDENTITY_PROVIDER_KEY] = FirebaseIdentityProvider.from_config(app.config)
    elif provider_name == "memory":
        app.extensions[IDENTITY_PROVIDER_KEY] = InMemoryIdentityProvider()
    else:
        raise RuntimeError(f"Unknown IDENTITY_PROVIDER {provider_name!r}")

    app.extensions[EMAIL_SENDER_KEY] = build_email_sender(app.config)

    backend = str(app.config.get("TOKEN_BLACKLIST_BACKEND", "database")).lower()
    if backend == "redis":
        from justping.infra.redis.redis_token_blacklist import RedisTokenBlacklist

        app.extensions[TOKEN_BLACKLIST_KEY] = RedisTokenBlacklist(get_redis())
    elif backend == "database":
        from justping.infra.sql.sql_token_blacklist import SQLTokenBlacklist

        app.extensions[TOKEN_BLACKLIST_KEY] = SQLTokenBlacklist()
    else:
        raise RuntimeError(f"Unknown TOKEN_BLACKLIST_BACKEND {backend!r}")


def _extension(key: str) -> Any:
    try:
        return current_app.extensions[key]
    except KeyError as exc:
        raise RuntimeError(f"{key} is not initialized. Call init_app() first.") from exc


def get_identity_provider():
    """Return the identity-provider adapter bound to the current app."""
    from justping.services._shared.ports.identity_provider import IdentityProvider

    return cast(IdentityProvider, _extension(IDENTITY_PROVIDER_KEY))


def get_email_sender():
    """Return the notification sink bound to the current app."""
    from justping.services._shared.ports.email_sender import EmailSender

    return cast(EmailSender, _extension(EMAIL_SENDER_KEY))


def get_token_blacklist():
    """Return the access-token blacklist bound to the current app."""
    from justping.services._shared.ports.token_blacklist import TokenBlacklist

    return cast(TokenBlacklist, _extension(TOKEN_BLACKLIST_KEY))


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Set REDIS_URL.")
    return redis_client
