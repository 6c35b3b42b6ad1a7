# FILE: imagifine/services/notification_service.py
"""Outbound email. Delivery is behind a small interface so tests can swap in a fake."""

import asyncio
import html
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional, Protocol

from imagifine.core import config
from imagifine.core.errors import NotificationFailed

logger = logging.getLogger("imagifine.mail")


class NotificationSender(Protocol):
    async def send(self, to: str, subject: str, html_body: str, text_body: Optional[str] = None) -> None:
        ...


class SmtpNotificationSender:
    def __init__(
        self,
        host: str = config.SMTP_HOST,
        port: int = config.SMTP_PORT,
        user: Optional[str] = config.SMTP_USER,
        password: Optional[str] = config.SMTP_PASSWORD,
        from_email: str = config.MAIL_FROM,
        from_name: str = config.MAIL_FROM_NAME,
        timeout: float = config.SMTP_TIMEOUT_SECONDS,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout

    def _build(self, to: str, subject: str, html_body: str, text_body: Optional[str]) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to
        if text_body:
            msg.set_content(text_body)
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _send_sync(self, msg: EmailMessage) -> None:
        ctx = ssl.create_default_context()
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as s:
            s.starttls(context=ctx)
            if self.user and self.password:
                s.login(self.user, self.password)
            s.send_message(msg)

    async def send(self, to: str, subject: str, html_body: str, text_body: Optional[str] = None) -> None:
        msg = self._build(to, subject, html_body, text_body)
        try:
            await asyncio.to_thread(self._send_sync, msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Email to %s failed (%s): %s", to, subject, exc)
            raise NotificationFailed(f"SMTP delivery to {to} failed: {exc}") from exc
        logger.info("Email sent to %s: %s", to, subject)


# ─────────────────────────────────────────────
# Templates
# ─────────────────────────────────────────────

async def send_otp(sender: NotificationSender, to: str, code: str) -> None:
    ttl = config.OTP_TTL_MINUTES
    await sender.send(
        to,
        "Email Verification OTP",
        f"""
            <h1>Email Verification</h1>
            <p>Your OTP for email verification is: <strong>{code}</strong></p>
            <p>This OTP will expire in {ttl} minutes.</p>
        """,
        f"Your OTP for email verification is: {code}. It expires in {ttl} minutes.",
    )


async def send_contact_confirmation(sender: NotificationSender, to: str, first_name: str, query: str) -> None:
    await sender.send(
        to,
        "Thank you for contacting Imagifine",
        f"""
            <h2>Thank you for reaching out!</h2>
            <p>Dear {html.escape(first_name)},</p>
            <p>We have received your query and will get back to you soon.</p>
            <p>Your query details:</p>
            <p>{html.escape(query)}</p>
            <br>
            <p>Best regards,</p>
            <p>Team Imagifine</p>
        """,
    )


async def send_contact_admin_notice(
    sender: NotificationSender, to: str, first_name: str, last_name: str, email: str, query: str
) -> None:
    await sender.send(
        to,
        "New Contact Form Submission",
        f"""
            <h2>New Contact Form Submission</h2>
            <p><strong>Name:</strong> {html.escape(first_name)} {html.escape(last_name)}</p>
            <p><strong>Email:</strong> {html.escape(email)}</p>
            <p><strong>Query:</strong> {html.escape(query)}</p>
        """,
    )
