from __future__ import annotations

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from justping.core.logger import redact_email
from justping.services._shared.ports.email_sender import EmailMessage

from .rendering import TemplateRenderer

log = logging.getLogger(__name__)


class SMTPEmailSender:
    """
    Deliver templated emails over SMTP (STARTTLS or implicit TLS).

    ``send`` raises :class:`smtplib.SMTPException` or :class:`OSError` on
    failure; the calling service decides whether that is fatal.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        user: str | None,
        password: str | None,
        use_tls: bool,
        timeout: int,
        from_email: str,
        from_name: str,
        renderer: TemplateRenderer,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.from_email = from_email
        self.from_name = from_name
        self.renderer = renderer

    def _build(self, message: EmailMessage) -> MIMEMultipart:
        rendered = self.renderer.render(message.template_name, message.variables)
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = message.to
        msg.attach(MIMEText(rendered.text, "plain"))
        msg.attach(MIMEText(rendered.html, "html"))
        return msg

    def send(self, message: EmailMessage) -> None:
        msg = self._build(message)
        context = ssl.create_default_context()
        if self.use_tls:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=context)
                self._login(server)
                server.sendmail(self.from_email, [message.to], msg.as_string())
        else:
            with smtplib.SMTP_SSL(self.host, self.port, context=context, timeout=self.timeout) as server:
                self._login(server)
                server.sendmail(self.from_email, [message.to], msg.as_string())
        log.info(
            "Email sent to=%s template=%s",
            redact_email(message.to),
            message.template_name,
            extra={"event": "email_sent"},
        )

    def _login(self, server: smtplib.SMTP) -> None:
        if self.user and self.password:
            server.login(self.user, self.password)
