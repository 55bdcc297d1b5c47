"""CORS policy for the admin console front-end."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from justping.core.logger import REQUEST_ID_HEADER


def init_app(app: Flask) -> None:
    """Allow the console origins to call ``/api/*`` with bearer tokens.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` and ``CORS_MAX_AGE`` settings are
        consulted. A blank value or ``"*"`` opens the API to any origin and
        turns credential support off.
    """
    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    wildcard = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
