"""Development sender: logs messages and keeps them in memory instead of delivering."""

import logging
import threading

from app.services.email.base import EmailMessage, EmailSender

logger = logging.getLogger(__name__)

BODY_PREVIEW_CHARS = 100


def _preview(text: str, length: int = BODY_PREVIEW_CHARS) -> str:
    return text if len(text) <= length else text[:length] + "..."


class MockEmailSender(EmailSender):
    """Records every sent message in sent_mails (useful for tests and local dev)."""

    def __init__(self, templates=None) -> None:
        super().__init__(templates)
        self.sent_mails: list[EmailMessage] = []
        self._lock = threading.Lock()

    def send(self, message: EmailMessage) -> None:
        logger.info(
            "[MOCK] Email sent to=%s subject=%r body_preview=%r",
            ",".join(message.to),
            message.subject,
            _preview(message.body),
        )
        with self._lock:
            self.sent_mails.append(message)

    def get_last_email(self) -> EmailMessage | None:
        with self._lock:
            return self.sent_mails[-1] if self.sent_mails else None

    def clear(self) -> None:
        with self._lock:
            self.sent_mails = []
