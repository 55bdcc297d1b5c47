from __future__ import annotations

import logging

from justping.core.logger import redact_email
from justping.services._shared.ports.email_sender import EmailMessage

from .rendering import TemplateRenderer

log = logging.getLogger(__name__)


class LogEmailSender:
    """
    Development sink: renders the template (so template errors surface early)
    and logs the envelope. The body is never logged since it carries links
    with raw tokens.
    """

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def send(self, message: EmailMessage) -> None:
        self.renderer.render(message.template_name, message.variables)
        log.info(
            "Email (log backend) to=%s subject=%r template=%s",
            redact_email(message.to),
            message.subject,
            message.template_name,
            extra={"event": "email_logged"},
        )
