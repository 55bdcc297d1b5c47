"""
Application factory for the JustPing auth core.

The app is assembled in a fixed order: settings, logging, request plumbing
(proxy headers, extensions and the auth adapters, request scope, CORS),
then the versioned API with its problem+json error handlers, and finally
the ``flask auth`` commands.
"""

from __future__ import annotations

from flask import Flask

from justping.core.config import BaseConfig, get_config
from justping.core.logger import configure_logging, init_app as init_logging

# Defaults in BaseConfig that must never sign tokens outside debug or tests.
PLACEHOLDER_SECRETS = frozenset({"CHANGE_ME", "CHANGE_ME_JWT"})


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build the auth-core application.

    :param config: Config object or import path; ``APP_ENV`` picks one when ``None``.
    :param instance_relative_config: Overlay ``instance/<instance_config_filename>``.
    :param instance_config_filename: Instance file read silently when present.
    :raises RuntimeError: A non-debug, non-testing config still uses a
        placeholder secret or an in-process adapter.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    _load_settings(app, config, instance_relative_config and instance_config_filename)
    check_auth_settings(app)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    _wire_request_plumbing(app)
    _wire_auth_api(app)

    from justping import cli as auth_cli

    auth_cli.init_app(app)
    return app


def _load_settings(app: Flask, config, instance_file: str | bool) -> None:
    app.config.from_object(get_config() if config is None else config)
    if instance_file:
        app.config.from_pyfile(instance_file, silent=True)


def check_auth_settings(app: Flask) -> None:
    """
    Refuse to start a deployed app with development credentials.

    Debug and testing apps are exempt; they run on placeholders and the
    in-memory identity provider on purpose.
    """
    if app.config.get("TESTING") or app.config.get("DEBUG"):
        return
    problems = [
        f"{key} is a placeholder"
        for key in ("SECRET_KEY", "JWT_SECRET_KEY")
        if not app.config.get(key) or app.config[key] in PLACEHOLDER_SECRETS
    ]
    for key in ("IDENTITY_PROVIDER", "EMAIL_BACKEND"):
        if app.config.get(key) == "memory":
            problems.append(f"{key}=memory is only allowed in debug or testing")
    if problems:
        raise RuntimeError("Refusing to start: " + "; ".join(problems))


def _wire_request_plumbing(app: Flask) -> None:
    """Proxy headers, extensions with the identity/email/blacklist adapters, request scope and CORS."""
    from justping.core import cors, extensions, proxy

    proxy.init_app(app)
    extensions.init_app(app)
    # Request ids must exist before any handler or error renderer logs.
    init_logging(app)
    cors.init_app(app)


def _wire_auth_api(app: Flask) -> None:
    from justping.api import init_app as init_api
    from justping.core import errors

    init_api(app)
    errors.init_app(app)
