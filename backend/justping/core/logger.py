"""
Logging setup for the auth core.

Every record is emitted as one JSON line on stdout. Records produced while a
request is in flight carry the request id and, once the request is
authenticated, the tenant (``business_id``) and the acting ``user_id``.
Email addresses must pass through :func:`redact_email` before they are
logged; raw credentials are never logged at all.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
_INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
_MAX_INBOUND_ID = 128

# Attributes copied from ``extra=`` into the JSON document.
_STRUCTURED_FIELDS = ("event", "endpoint", "method", "status", "elapsed_ms", "user_id", "business_id")

access_log = logging.getLogger("justping.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting logic
        doc: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in _STRUCTURED_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                doc[key] = value
        if record.exc_info:
            doc["exc"] = self.formatException(record.exc_info)
        return json.dumps(doc, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp request id and tenant identity onto records emitted inside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            record.request_id = None
            return True
        record.request_id = ensure_request_id()
        auth = g.get("auth")
        if auth is not None:
            if getattr(record, "business_id", None) is None:
                record.business_id = auth.business_id
            if getattr(record, "user_id", None) is None:
                record.user_id = auth.user_id
        return True


def ensure_request_id() -> str:
    """
    Return the id of the current request.

    An inbound ``X-Request-ID`` (or ``X-Correlation-ID``) is reused when it
    is short enough to be a sane identifier; otherwise a UUID4 is minted.
    Outside a request a throwaway UUID is returned.
    """
    if not has_request_context():
        return str(uuid4())
    current = g.get("request_id")
    if current:
        return current
    for header in _INBOUND_ID_HEADERS:
        value = (request.headers.get(header) or "").strip()
        if value and len(value) <= _MAX_INBOUND_ID:
            g.request_id = value
            return value
    g.request_id = str(uuid4())
    return g.request_id


def redact_email(email: str) -> str:
    """
    Mask an address for log output.

    >>> redact_email("founder@acme.example.com")
    'fo***@acme.example.com'
    """
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


def configure_logging(level: str | int = "INFO") -> None:
    """Replace root handlers with a single JSON stdout handler."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Open a fresh request scope per request and write one access line when it ends."""
    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _open_request_scope() -> None:
        # The app context can outlive a request (tests, CLI); never reuse a previous id or identity.
        g.pop("request_id", None)
        g.pop("auth", None)
        g.request_started = time.perf_counter()
        ensure_request_id()

    @app.after_request
    def _close_request_scope(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.pop("request_started", None)
        if started is not None:
            access_log.info(
                "%s %s -> %s",
                request.method,
                request.path,
                response.status_code,
                extra={
                    "event": "http.request",
                    "method": request.method,
                    "endpoint": request.endpoint,
                    "status": response.status_code,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        return response


__all__ = ["REQUEST_ID_HEADER", "configure_logging", "init_app", "ensure_request_id", "redact_email"]
