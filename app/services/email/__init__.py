"""Outgoing email: sender interface, templates and backends."""

from typing import TYPE_CHECKING

from app.services.email.base import (
    DEFAULT_TEMPLATES,
    TEMPLATE_EMAIL_VERIFY,
    TEMPLATE_PASSWORD_CHANGED,
    TEMPLATE_PASSWORD_RESET,
    TEMPLATE_WELCOME,
    EmailMessage,
    EmailSender,
    EmailTemplate,
    render_template,
)
from app.services.email.mock import MockEmailSender
from app.services.email.smtp import SMTPEmailSender

if TYPE_CHECKING:
    from app.core.config import Settings


def build_email_sender(settings: "Settings") -> EmailSender:
    """Select the backend named by EMAIL_BACKEND."""
    if settings.EMAIL_BACKEND == "smtp":
        return SMTPEmailSender(settings)
    return MockEmailSender()


__all__ = [
    "DEFAULT_TEMPLATES",
    "TEMPLATE_EMAIL_VERIFY",
    "TEMPLATE_PASSWORD_CHANGED",
    "TEMPLATE_PASSWORD_RESET",
    "TEMPLATE_WELCOME",
    "EmailMessage",
    "EmailSender",
    "EmailTemplate",
    "MockEmailSender",
    "SMTPEmailSender",
    "build_email_sender",
    "render_template",
]
