"""Email message type, sender interface and the built-in templates."""

import html
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

TEMPLATE_PASSWORD_RESET = "password_reset"
TEMPLATE_EMAIL_VERIFY = "email_verify"
TEMPLATE_WELCOME = "welcome"
TEMPLATE_PASSWORD_CHANGED = "password_changed"


@dataclass
class EmailMessage:
    to: list[str]
    subject: str
    body: str
    html_body: str | None = None
    from_address: str | None = None
    reply_to: str | None = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    body: str
    html: str


_HTML_WRAPPER = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
{content}
    </div>
</body>
</html>
"""

_BUTTON = (
    '<p style="margin: 30px 0;"><a href="{href}" style="background-color: #3b82f6; '
    'color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; '
    'display: inline-block;">{label}</a></p>'
)


def _page(*lines: str) -> str:
    return _HTML_WRAPPER.replace("{content}", "\n".join("        " + line for line in lines))


DEFAULT_TEMPLATES: dict[str, EmailTemplate] = {
    TEMPLATE_PASSWORD_RESET: EmailTemplate(
        subject="Reset Your Password",
        body=(
            "Hello {name},\n\n"
            "Click the following link to reset your password: {reset_url}\n\n"
            "This link expires in {expires_in}.\n\n"
            "If you didn't request this, please ignore this email."
        ),
        html=_page(
            '<h2 style="color: #3b82f6;">Reset Your Password</h2>',
            "<p>Click the button below to reset your password:</p>",
            _BUTTON.format(href="{reset_url}", label="Reset Password"),
            '<p style="color: #666; font-size: 14px;">This link expires in {expires_in}.</p>',
            '<p style="color: #666; font-size: 14px;">If you didn\'t request this, please ignore this email.</p>',
        ),
    ),
    TEMPLATE_EMAIL_VERIFY: EmailTemplate(
        subject="Verify Your Email",
        body=(
            "Click the following link to verify your email: {verify_url}\n\n"
            "This link expires in {expires_in}."
        ),
        html=_page(
            '<h2 style="color: #3b82f6;">Verify Your Email</h2>',
            "<p>Click the button below to verify your email address:</p>",
            _BUTTON.format(href="{verify_url}", label="Verify Email"),
            '<p style="color: #666; font-size: 14px;">This link expires in {expires_in}.</p>',
        ),
    ),
    TEMPLATE_WELCOME: EmailTemplate(
        subject="Welcome to {app_name}!",
        body=(
            "Welcome to {app_name}!\n\n"
            "Your account has been created successfully.\n\n"
            "Email: {email}\n\n"
            "Get started: {dashboard_url}"
        ),
        html=_page(
            '<h2 style="color: #3b82f6;">Welcome to {app_name}!</h2>',
            "<p>Your account has been created successfully.</p>",
            "<p><strong>Email:</strong> {email}</p>",
            _BUTTON.format(href="{dashboard_url}", label="Go to Dashboard"),
        ),
    ),
    TEMPLATE_PASSWORD_CHANGED: EmailTemplate(
        subject="Your Password Was Changed",
        body=(
            "Your password was changed successfully.\n\n"
            "If you didn't make this change, please contact support immediately."
        ),
        html=_page(
            '<h2 style="color: #3b82f6;">Password Changed</h2>',
            "<p>Your password was changed successfully.</p>",
            '<p style="color: #666; font-size: 14px;">If you didn\'t make this change, '
            "please contact support immediately.</p>",
        ),
    ),
}


class _TemplateData(dict):
    # Placeholders without data render empty rather than raising
    def __missing__(self, key: str) -> str:
        return ""


def render_template(
    templates: Mapping[str, EmailTemplate],
    template_name: str,
    data: Mapping[str, Any],
) -> tuple[str, str, str]:
    """Return (subject, text body, html body). Values are HTML-escaped in the html part."""
    template = templates.get(template_name)
    if template is None:
        raise ValueError(f"Unknown email template: {template_name}")
    plain = _TemplateData({k: "" if v is None else str(v) for k, v in data.items()})
    escaped = _TemplateData({k: html.escape(v, quote=True) for k, v in plain.items()})
    return (
        template.subject.format_map(plain),
        template.body.format_map(plain),
        template.html.format_map(escaped),
    )


class EmailSender(ABC):
    """Capability interface for outgoing mail."""

    def __init__(self, templates: Mapping[str, EmailTemplate] | None = None) -> None:
        self.templates: dict[str, EmailTemplate] = dict(templates or DEFAULT_TEMPLATES)

    @abstractmethod
    def send(self, message: EmailMessage) -> None:
        """Deliver one message. Raises EmailDeliveryError on transport failure."""

    def send_template(
        self,
        to: list[str],
        template_name: str,
        data: Mapping[str, Any],
    ) -> None:
        subject, body, html_body = render_template(self.templates, template_name, data)
        self.send(EmailMessage(to=list(to), subject=subject, body=body, html_body=html_body))
