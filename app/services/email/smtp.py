"""SMTP sender supporting implicit TLS (port 465), STARTTLS (port 587) and plain connections."""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING

from app.core.exceptions import EmailDeliveryError
from app.services.email.base import EmailMessage, EmailSender

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


class SMTPEmailSender(EmailSender):
    def __init__(self, settings: "Settings", templates=None) -> None:
        super().__init__(templates)
        self._settings = settings

    def _default_from(self) -> str:
        return f"{self._settings.SMTP_FROM_NAME} <{self._settings.SMTP_FROM_ADDRESS}>"

    def _create_message(self, message: EmailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = message.from_address or self._default_from()
        msg["To"] = ", ".join(message.to)
        if message.reply_to:
            msg["Reply-To"] = message.reply_to
        for key, value in message.headers.items():
            msg[key] = value

        msg.attach(MIMEText(message.body, "plain", "utf-8"))
        if message.html_body:
            msg.attach(MIMEText(message.html_body, "html", "utf-8"))
        return msg

    def send(self, message: EmailMessage) -> None:
        settings = self._settings
        mime = self._create_message(message)
        password = settings.SMTP_PASSWORD.get_secret_value() if settings.SMTP_PASSWORD else ""

        try:
            if settings.SMTP_USE_TLS and not settings.SMTP_STARTTLS:
                # Implicit TLS (port 465)
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(
                    settings.SMTP_HOST,
                    settings.SMTP_PORT,
                    context=context,
                    timeout=settings.SMTP_TIMEOUT_SEC,
                ) as server:
                    if settings.SMTP_USER:
                        server.login(settings.SMTP_USER, password)
                    server.send_message(mime)
            else:
                # STARTTLS (port 587) or plain
                with smtplib.SMTP(
                    settings.SMTP_HOST,
                    settings.SMTP_PORT,
                    timeout=settings.SMTP_TIMEOUT_SEC,
                ) as server:
                    if settings.SMTP_STARTTLS:
                        server.starttls(context=ssl.create_default_context())
                    if settings.SMTP_USER:
                        server.login(settings.SMTP_USER, password)
                    server.send_message(mime)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", ",".join(message.to), e)
            raise EmailDeliveryError(f"Failed to send email: {e}") from e

        logger.info("Email sent to %s", ",".join(message.to))
