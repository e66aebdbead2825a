"""
Tests for SMTP email notifications.
"""

import logging
import smtplib
import pytest

from app.config import Settings
from app.services import notifications
from app.services.notifications import Notifier, get_notifier, render_contact_email, render_inquiry_email


class FakeSMTP:
    """Stands in for smtplib.SMTP and SMTP_SSL, recording the session."""

    instances = []
    fail_login = False

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls = []
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        if FakeSMTP.fail_login:
            raise smtplib.SMTPAuthenticationError(535, b"Authentication failed")
        self.calls.append(("login", user, password))

    def send_message(self, message):
        self.messages.append(message)


@pytest.fixture(autouse=True)
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_login = False
    monkeypatch.setattr(notifications.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(notifications.smtplib, "SMTP_SSL", FakeSMTP)
    return FakeSMTP


def mail_settings(**overrides) -> Settings:
    values = {
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_user": "mailer",
        "smtp_password": "secret",
        "smtp_secure": False,
        "mail_from": "HomeSphere <no-reply@example.com>",
        "admin_email": "admin@example.com",
    }
    values.update(overrides)
    return Settings(**values)


class TestNotifier:
    """Test email delivery outcomes."""

    @pytest.mark.asyncio
    async def test_not_configured(self, caplog):
        notifier = Notifier(mail_settings(smtp_host=None))

        with caplog.at_level(logging.WARNING, logger="app.services.notifications"):
            first = await notifier.send_email("owner@example.com", "Hi", "<p>Hi</p>")
            second = await notifier.send_email("owner@example.com", "Hi", "<p>Hi</p>")

        assert first == {"sent": False, "reason": "not_configured"}
        assert second == first
        assert [r.getMessage() for r in caplog.records].count("Email disabled: missing SMTP settings") == 1
        assert FakeSMTP.instances == []

    @pytest.mark.asyncio
    async def test_send_with_starttls(self):
        notifier = Notifier(mail_settings())

        result = await notifier.send_email("owner@example.com", "New inquiry", "<p>Hello</p>")

        assert result["sent"] is True
        assert result["message_id"]
        smtp = FakeSMTP.instances[0]
        assert (smtp.host, smtp.port) == ("smtp.example.com", 587)
        assert smtp.calls == ["starttls", ("login", "mailer", "secret")]

        message = smtp.messages[0]
        assert message["To"] == "owner@example.com"
        assert message["From"] == "HomeSphere <no-reply@example.com>"
        assert message["Subject"] == "New inquiry"
        assert "<p>Hello</p>" in message.get_body(preferencelist=("html",)).get_content()

    @pytest.mark.asyncio
    async def test_send_over_ssl(self):
        notifier = Notifier(mail_settings(smtp_secure=True, smtp_port=465))

        await notifier.send_email("owner@example.com", "Subject", "<p>x</p>", sender="Custom <c@example.com>")

        smtp = FakeSMTP.instances[0]
        assert smtp.port == 465
        assert "starttls" not in smtp.calls
        assert smtp.messages[0]["From"] == "Custom <c@example.com>"

    @pytest.mark.asyncio
    async def test_delivery_failure_is_reported(self, fake_smtp):
        fake_smtp.fail_login = True
        notifier = Notifier(mail_settings())

        result = await notifier.send_email("owner@example.com", "Subject", "<p>x</p>")

        assert result["sent"] is False
        assert "Authentication failed" in result["reason"]

    def test_admin_email(self):
        assert Notifier(mail_settings()).admin_email == "admin@example.com"
        assert Notifier(mail_settings(admin_email=None)).admin_email is None

    def test_get_notifier_is_shared(self):
        assert get_notifier() is get_notifier()


class TestEmailTemplates:
    """Test HTML bodies."""

    def test_inquiry_email(self):
        html = render_inquiry_email("Villa <One>", "Anita", "anita@example.com", "+91 1", "Hello & welcome")

        assert "Villa &lt;One&gt;" in html
        assert "+91 1" in html
        assert "Hello &amp; welcome" in html

    def test_contact_email_without_phone(self):
        html = render_contact_email("Ravi", "ravi@example.com", None, "Hi")

        assert "contact form" in html
        assert "Phone" not in html
