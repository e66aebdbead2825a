"""
Email notifications for inquiries and the contact form.
Sending never raises; every outcome is reported as {"sent": bool, ...}.
"""

from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from functools import lru_cache
from html import escape
from typing import Any, Dict, Optional
import logging
import smtplib

from fastapi.concurrency import run_in_threadpool

from app.config import Settings, settings as app_settings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 30


@dataclass
class SMTPTransport:
    """Resolved SMTP connection parameters."""

    host: str
    port: int
    user: str
    password: str
    secure: bool


class Notifier:
    """
    Sends HTML email over SMTP.
    The transport is resolved on first use and reused afterwards; without
    SMTP credentials mail is disabled and a single warning is logged.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._transport: Optional[SMTPTransport] = None
        self._resolved = False

    @property
    def admin_email(self) -> Optional[str]:
        return self.settings.admin_email

    def _get_transport(self) -> Optional[SMTPTransport]:
        if not self._resolved:
            self._resolved = True
            if self.settings.mail_configured:
                self._transport = SMTPTransport(
                    host=self.settings.smtp_host,
                    port=self.settings.smtp_port,
                    user=self.settings.smtp_user,
                    password=self.settings.smtp_password,
                    secure=self.settings.smtp_secure
                )
            else:
                logger.warning("Email disabled: missing SMTP settings")
        return self._transport

    def _deliver(self, transport: SMTPTransport, message: EmailMessage) -> None:
        if transport.secure:
            with smtplib.SMTP_SSL(transport.host, transport.port, timeout=SMTP_TIMEOUT_SECONDS) as smtp:
                smtp.login(transport.user, transport.password)
                smtp.send_message(message)
        else:
            with smtplib.SMTP(transport.host, transport.port, timeout=SMTP_TIMEOUT_SECONDS) as smtp:
                smtp.starttls()
                smtp.login(transport.user, transport.password)
                smtp.send_message(message)

    async def send_email(self, to: str, subject: str, html: str, sender: Optional[str] = None) -> Dict[str, Any]:
        """
        Send an HTML email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            sender: From header, defaults to settings.mail_from

        Returns:
            {"sent": True, "message_id": ...} or {"sent": False, "reason": ...}
        """
        transport = self._get_transport()
        if transport is None:
            return {"sent": False, "reason": "not_configured"}

        message = EmailMessage()
        message["From"] = sender or self.settings.mail_from
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain="homesphere.local")
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            await run_in_threadpool(self._deliver, transport, message)
        except Exception as e:
            logger.error(f"Failed to send email to {to}: {e}", extra={"subject": subject})
            return {"sent": False, "reason": str(e)}

        logger.info(f"Sent email to {to}: {subject}")
        return {"sent": True, "message_id": message["Message-ID"]}


@lru_cache()
def get_notifier() -> Notifier:
    """Process-wide notifier, injected with Depends."""
    return Notifier(app_settings)


def _contact_items(name: str, email: str, phone: Optional[str]) -> str:
    items = [
        f"<li><strong>Name:</strong> {escape(name)}</li>",
        f"<li><strong>Email:</strong> {escape(email)}</li>",
    ]
    if phone:
        items.append(f"<li><strong>Phone:</strong> {escape(phone)}</li>")
    return "\n".join(items)


def render_inquiry_email(title: str, name: str, email: str, phone: Optional[str], message: str) -> str:
    """HTML body for a new-inquiry notification."""
    return (
        "<div>"
        f"<p>You have a new inquiry for <strong>{escape(title)}</strong>.</p>"
        f"<ul>{_contact_items(name, email, phone)}</ul>"
        "<p><strong>Message:</strong></p>"
        f"<p>{escape(message)}</p>"
        "</div>"
    )


def render_contact_email(name: str, email: str, phone: Optional[str], message: str) -> str:
    """HTML body for a contact-form message."""
    return (
        "<div>"
        "<p>You have received a new message via the contact form.</p>"
        f"<ul>{_contact_items(name, email, phone)}</ul>"
        "<p><strong>Message:</strong></p>"
        f"<p>{escape(message)}</p>"
        "</div>"
    )
