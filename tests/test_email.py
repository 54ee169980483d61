"""Tests for email templates, the mock sender and the SMTP sender (smtplib patched)."""

import smtplib
import unittest
from unittest.mock import MagicMock, patch

from app.core.exceptions import EmailDeliveryError
from app.services.email import (
    DEFAULT_TEMPLATES,
    TEMPLATE_PASSWORD_RESET,
    TEMPLATE_WELCOME,
    EmailMessage,
    EmailTemplate,
    MockEmailSender,
    SMTPEmailSender,
    build_email_sender,
    render_template,
)

from helpers import make_settings


class TestRenderTemplate(unittest.TestCase):
    def test_reset_template(self) -> None:
        subject, body, html_body = render_template(
            DEFAULT_TEMPLATES,
            TEMPLATE_PASSWORD_RESET,
            {"reset_url": "https://app/reset-password?token=abc&x=1", "expires_in": "1 hour"},
        )
        self.assertEqual(subject, "Reset Your Password")
        self.assertIn("https://app/reset-password?token=abc&x=1", body)
        self.assertIn("expires in 1 hour", body)
        # html part escapes values, the text part does not
        self.assertIn("token=abc&amp;x=1", html_body)

    def test_subject_placeholders(self) -> None:
        subject, _, html_body = render_template(
            DEFAULT_TEMPLATES, TEMPLATE_WELCOME, {"app_name": "<Keyhold>", "email": "a@b.c"}
        )
        self.assertEqual(subject, "Welcome to <Keyhold>!")
        self.assertIn("&lt;Keyhold&gt;", html_body)
        self.assertNotIn("<Keyhold>", html_body)

    def test_missing_values_render_empty(self) -> None:
        _, body, _ = render_template(DEFAULT_TEMPLATES, TEMPLATE_PASSWORD_RESET, {})
        self.assertIn("reset your password: \n", body)

    def test_unknown_template(self) -> None:
        with self.assertRaises(ValueError):
            render_template(DEFAULT_TEMPLATES, "no_such_template", {})

    def test_custom_templates(self) -> None:
        sender = MockEmailSender({"ping": EmailTemplate(subject="Ping {n}", body="n={n}", html="<b>{n}</b>")})
        sender.send_template(["x@example.com"], "ping", {"n": 3})
        message = sender.get_last_email()
        self.assertEqual((message.subject, message.body, message.html_body), ("Ping 3", "n=3", "<b>3</b>"))


class TestMockEmailSender(unittest.TestCase):
    def test_records_and_clears(self) -> None:
        sender = MockEmailSender()
        self.assertIsNone(sender.get_last_email())
        with self.assertLogs("app.services.email.mock", level="INFO"):
            sender.send(EmailMessage(to=["a@example.com"], subject="One", body="first"))
        sender.send(EmailMessage(to=["b@example.com"], subject="Two", body="x" * 500))
        self.assertEqual([m.subject for m in sender.sent_mails], ["One", "Two"])
        self.assertEqual(sender.get_last_email().to, ["b@example.com"])
        sender.clear()
        self.assertEqual(sender.sent_mails, [])


class TestSMTPEmailSender(unittest.TestCase):
    def _message(self) -> EmailMessage:
        return EmailMessage(
            to=["alice@example.com"],
            subject="Hello",
            body="plain text",
            html_body="<p>html</p>",
            reply_to="support@example.com",
        )

    @patch("app.services.email.smtp.smtplib.SMTP")
    def test_starttls_with_login(self, smtp_cls: MagicMock) -> None:
        settings = make_settings(
            EMAIL_BACKEND="smtp",
            SMTP_HOST="mail.example.com",
            SMTP_PORT=587,
            SMTP_USER="mailer",
            SMTP_PASSWORD="hunter2",
            SMTP_FROM_ADDRESS="no-reply@example.com",
        )
        server = smtp_cls.return_value.__enter__.return_value
        SMTPEmailSender(settings).send(self._message())

        smtp_cls.assert_called_once_with("mail.example.com", 587, timeout=30.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "hunter2")
        sent = server.send_message.call_args.args[0]
        self.assertEqual(sent["To"], "alice@example.com")
        self.assertEqual(sent["From"], "Keyhold <no-reply@example.com>")
        self.assertEqual(sent["Reply-To"], "support@example.com")
        self.assertEqual(sent.get_content_subtype(), "alternative")
        self.assertEqual([p.get_content_type() for p in sent.get_payload()], ["text/plain", "text/html"])

    @patch("app.services.email.smtp.smtplib.SMTP")
    def test_plain_without_login(self, smtp_cls: MagicMock) -> None:
        settings = make_settings(
            EMAIL_BACKEND="smtp", SMTP_HOST="localhost", SMTP_PORT=1025, SMTP_STARTTLS=False
        )
        server = smtp_cls.return_value.__enter__.return_value
        SMTPEmailSender(settings).send(self._message())
        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.send_message.assert_called_once()

    @patch("app.services.email.smtp.smtplib.SMTP_SSL")
    def test_implicit_tls(self, smtp_ssl_cls: MagicMock) -> None:
        settings = make_settings(
            EMAIL_BACKEND="smtp",
            SMTP_HOST="mail.example.com",
            SMTP_PORT=465,
            SMTP_USE_TLS=True,
            SMTP_STARTTLS=False,
        )
        SMTPEmailSender(settings).send(self._message())
        self.assertEqual(smtp_ssl_cls.call_args.args, ("mail.example.com", 465))
        smtp_ssl_cls.return_value.__enter__.return_value.send_message.assert_called_once()

    @patch("app.services.email.smtp.smtplib.SMTP")
    def test_transport_failure_raises_delivery_error(self, smtp_cls: MagicMock) -> None:
        settings = make_settings(EMAIL_BACKEND="smtp", SMTP_HOST="mail.example.com")
        smtp_cls.return_value.__enter__.return_value.send_message.side_effect = (
            smtplib.SMTPRecipientsRefused({"alice@example.com": (550, b"no such user")})
        )
        with self.assertRaises(EmailDeliveryError) as ctx:
            SMTPEmailSender(settings).send(self._message())
        self.assertEqual(ctx.exception.code, "EMAIL_ERROR")

    @patch("app.services.email.smtp.smtplib.SMTP")
    def test_connection_refused(self, smtp_cls: MagicMock) -> None:
        settings = make_settings(EMAIL_BACKEND="smtp", SMTP_HOST="mail.example.com")
        smtp_cls.side_effect = ConnectionRefusedError("refused")
        with self.assertRaises(EmailDeliveryError):
            SMTPEmailSender(settings).send(self._message())


class TestBuildEmailSender(unittest.TestCase):
    def test_selects_backend(self) -> None:
        self.assertIsInstance(build_email_sender(make_settings()), MockEmailSender)
        smtp = build_email_sender(make_settings(EMAIL_BACKEND="smtp", SMTP_HOST="mail.example.com"))
        self.assertIsInstance(smtp, SMTPEmailSender)


if __name__ == "__main__":
    unittest.main()
