"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Load .env during development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back on garbage."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing. Defaults to a development-safe
        placeholder and should be overridden in production.
    JWT_SECRET_KEY: str
        Shared secret used by ``flask-jwt-extended`` to sign access and
        refresh tokens.
    JWT_ACCESS_EXPIRES_IN: str
        Access-token lifetime as a duration string (``"1h"``, ``"30m"``).
    JWT_REFRESH_EXPIRES_IN: str
        Refresh-token lifetime as a duration string (``"7d"``).
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    IDENTITY_PROVIDER: str
        ``"firebase"`` for the Firebase adapter or ``"memory"`` for the
        in-process double used in development and tests.
    TOKEN_BLACKLIST_BACKEND: str
        ``"database"`` (default) or ``"redis"``.
    EMAIL_BACKEND: str
        ``"log"`` writes notifications to the log, ``"smtp"`` delivers them,
        ``"memory"`` keeps them in an outbox for tests.
    FRONTEND_URL: str
        Base URL used to build set-password and reset-password links.
    REGISTRATION_TOKEN_TTL_HOURS: int
        Lifetime of the credential-setup token sent after registration.
    PASSWORD_RESET_TOKEN_TTL_HOURS: int
        Lifetime of a password-reset token.
    REGISTRATION_COMPENSATE_IDENTITY: bool
        Delete the external identity account when registration rolls back.
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to login and forgot-password.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ACCESS_EXPIRES_IN = os.getenv("JWT_ACCESS_EXPIRES_IN", "1h")
    JWT_REFRESH_EXPIRES_IN = os.getenv("JWT_REFRESH_EXPIRES_IN", "7d")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    DB_STATEMENT_TIMEOUT_MS = env_int("DB_STATEMENT_TIMEOUT_MS", 5000)

    # Identity provider
    IDENTITY_PROVIDER = os.getenv("IDENTITY_PROVIDER", "firebase")
    IDENTITY_PROVIDER_TIMEOUT = env_int("IDENTITY_PROVIDER_TIMEOUT", 10)
    FIREBASE_API_KEY = os.getenv("FIREBASE_API_KEY", "")
    FIREBASE_CREDENTIALS_FILE = os.getenv("FIREBASE_CREDENTIALS_FILE") or os.getenv(
        "GOOGLE_APPLICATION_CREDENTIALS"
    )
    FIREBASE_PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT_ID")

    # Revocation
    TOKEN_BLACKLIST_BACKEND = os.getenv("TOKEN_BLACKLIST_BACKEND", "database")
    REDIS_URL = os.getenv("REDIS_URL")

    # Notifications
    EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "log")
    EMAIL_DEFAULT_SENDER = os.getenv("EMAIL_DEFAULT_SENDER", "no-reply@justping.local")
    EMAIL_SENDER_NAME = os.getenv("EMAIL_SENDER_NAME", "JustPing")
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = env_int("SMTP_PORT", 587)
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_USE_TLS = env_bool("SMTP_USE_TLS", True)
    SMTP_TIMEOUT = env_int("SMTP_TIMEOUT", 30)
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # Auth flows
    REGISTRATION_TOKEN_TTL_HOURS = env_int("REGISTRATION_TOKEN_TTL_HOURS", 24)
    PASSWORD_RESET_TOKEN_TTL_HOURS = env_int("PASSWORD_RESET_TOKEN_TTL_HOURS", 1)
    REGISTRATION_COMPENSATE_IDENTITY = env_bool("REGISTRATION_COMPENSATE_IDENTITY", True)

    # Rate limiting (Flask-Limiter)
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("REDIS_URL") or "memory://"

    # Flask
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS & proxy
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and falls back to the in-memory identity
    provider unless ``IDENTITY_PROVIDER`` is set explicitly.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    IDENTITY_PROVIDER = os.getenv("IDENTITY_PROVIDER", "memory")
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Wires in-process doubles for the identity provider and email sink.
    - Disables rate limiting so repeated logins do not trip the limiter.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = True
    JWT_SECRET_KEY = "testing-secret-key-that-is-long-enough-for-hs256"
    IDENTITY_PROVIDER = "memory"
    EMAIL_BACKEND = "memory"
    TOKEN_BLACKLIST_BACKEND = "database"
    REDIS_URL = None
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = "memory://"
    FRONTEND_URL = "http://frontend.test"
    USE_PROXYFIX = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled while relying on WSGI-level log
    configuration for noise control.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
