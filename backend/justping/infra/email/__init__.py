"""Notification sinks for the :class:`EmailSender` port, selected by ``EMAIL_BACKEND``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from justping.services._shared.ports.email_sender import EmailSender, InMemoryEmailSender

from .log_sender import LogEmailSender
from .rendering import TemplateRenderer
from .smtp_sender import SMTPEmailSender


def build_email_sender(config: Mapping[str, Any]) -> EmailSender:
    """
    Return the sink named by ``EMAIL_BACKEND``: ``log``, ``smtp`` or ``memory``.

    :raises RuntimeError: On an unknown backend or an SMTP backend without a host.
    """
    backend = str(config.get("EMAIL_BACKEND", "log")).lower()
    if backend == "memory":
        return InMemoryEmailSender()
    if backend == "log":
        return LogEmailSender(renderer=TemplateRenderer())
    if backend == "smtp":
        if not config.get("SMTP_HOST"):
            raise RuntimeError("EMAIL_BACKEND=smtp requires SMTP_HOST")
        return SMTPEmailSender(
            host=str(config["SMTP_HOST"]),
            port=int(config.get("SMTP_PORT", 587)),
            user=config.get("SMTP_USER"),
            password=config.get("SMTP_PASSWORD"),
            use_tls=bool(config.get("SMTP_USE_TLS", True)),
            timeout=int(config.get("SMTP_TIMEOUT", 30)),
            from_email=str(config.get("EMAIL_DEFAULT_SENDER")),
            from_name=str(config.get("EMAIL_SENDER_NAME", "JustPing")),
            renderer=TemplateRenderer(),
        )
    raise RuntimeError(f"Unknown EMAIL_BACKEND {backend!r}")


__all__ = ["LogEmailSender", "SMTPEmailSender", "TemplateRenderer", "build_email_sender"]
