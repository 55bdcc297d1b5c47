from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class EmailMessage:
    """
    A templated notification.

    :ivar to: Recipient address.
    :ivar subject: Subject line.
    :ivar template_name: Template key, e.g. ``"welcome"``.
    :ivar variables: Values rendered into the template.
    """

    to: str
    subject: str
    template_name: str
    variables: dict[str, Any] = field(default_factory=dict)


class EmailSender(Protocol):
    """Notification sink. ``send`` may raise; callers decide whether that is fatal."""

    def send(self, message: EmailMessage) -> None: ...


class InMemoryEmailSender(EmailSender):
    """Outbox double that records every message instead of delivering it."""

    def __init__(self) -> None:
        self.outbox: list[EmailMessage] = []

    def send(self, message: EmailMessage) -> None:
        self.outbox.append(message)

    def last_to(self, recipient: str) -> EmailMessage | None:
        for message in reversed(self.outbox):
            if message.to == recipient:
                return message
        return None
