"""Admin notification email for new or updated customer profiles.

Sending is best effort: :class:`BestEffortNotifier` logs failures and never
lets them reach the request that triggered the notification.
"""
from __future__ import annotations

import asyncio
import logging
import smtplib
from datetime import datetime
from email.message import EmailMessage
from html import escape
from typing import Any, Dict, Protocol

from .config import settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send_profile_submitted(self, profile: Dict[str, Any]) -> None: ...


def _field(profile: Dict[str, Any], name: str, fallback: str) -> str:
    value = profile.get(name)
    return escape(str(value)) if value else fallback


def render_admin_email(profile: Dict[str, Any], submitted_at: datetime | None = None) -> tuple[str, str]:
    """Return ``(subject, html)`` for a submitted profile."""
    submitted_at = submitted_at or datetime.now()
    role = profile.get("customer_role")
    if role == "Buyer":
        role_rows = f"<li><strong>Retailer Type:</strong> {_field(profile, 'retailer_type', 'Not specified')}</li>"
    else:
        role_rows = (
            f"<li><strong>Supplier Type:</strong> {_field(profile, 'supplier_type', 'Not specified')}</li>\n"
            f"      <li><strong>Registration #:</strong> {_field(profile, 'business_registration', 'Not provided')}</li>"
        )

    html = f"""
    <h2>New Customer Profile Created - Verification Required</h2>

    <h3>Customer Details:</h3>
    <ul>
      <li><strong>Name:</strong> {_field(profile, 'customer_name', '')}</li>
      <li><strong>Email:</strong> {_field(profile, 'customer_email', 'Not provided')}</li>
      <li><strong>Phone:</strong> {_field(profile, 'customer_phone', 'Not provided')}</li>
      <li><strong>Country:</strong> {_field(profile, 'country', '')}</li>
      <li><strong>Role:</strong> {_field(profile, 'customer_role', '')}</li>
    </ul>

    <h3>Business Information:</h3>
    <ul>
      <li><strong>Company:</strong> {_field(profile, 'business_name', '')}</li>
      <li><strong>Website:</strong> {_field(profile, 'domain_name', 'Not provided')}</li>
      <li><strong>Employees:</strong> {_field(profile, 'number_of_employees', '')}</li>
      {role_rows}
    </ul>

    <p><strong>Customer ID:</strong> {_field(profile, 'customerId', '')}</p>
    <p><strong>Submitted:</strong> {submitted_at:%Y-%m-%d %H:%M:%S}</p>

    <p>Please review and verify this customer profile.</p>
    """
    subject = f"New {role} Profile - {profile.get('business_name')}"
    return subject, html


class SmtpNotifier:
    def __init__(
        self,
        host: str = settings.email_smtp_host,
        port: int = settings.email_smtp_port,
        user: str = settings.email_user,
        password: str = settings.email_pass,
        recipient: str = settings.admin_email,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.recipient = recipient

    def _send(self, message: EmailMessage) -> None:
        with smtplib.SMTP_SSL(self.host, self.port, timeout=30) as smtp:
            smtp.login(self.user, self.password)
            smtp.send_message(message)

    async def send_profile_submitted(self, profile: Dict[str, Any]) -> None:
        if not (self.user and self.password and self.recipient):
            logger.info("Mail credentials not configured; skipping admin notification")
            return
        subject, html = render_admin_email(profile)
        message = EmailMessage()
        message["From"] = self.user
        message["To"] = self.recipient
        message["Subject"] = subject
        message.set_content("A new customer profile requires verification.")
        message.add_alternative(html, subtype="html")
        await asyncio.to_thread(self._send, message)
        logger.info("Admin notification email sent successfully")


class BestEffortNotifier:
    def __init__(self, inner: Notifier) -> None:
        self.inner = inner

    async def send_profile_submitted(self, profile: Dict[str, Any]) -> None:
        try:
            await self.inner.send_profile_submitted(profile)
        except Exception:
            logger.exception("Failed to send admin notification for customer %s", profile.get("customerId"))
