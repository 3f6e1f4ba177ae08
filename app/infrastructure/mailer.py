"""SMTP mail client: delivers OTP verification codes.

Sending is synchronous and attempted once; the caller decides what a
failure means for its own unit of work.
"""

import smtplib
from email.message import EmailMessage
from typing import Protocol

import structlog

from app.config import get_settings
from app.core.exceptions import MailDeliveryException

settings = get_settings()
logger = structlog.get_logger(__name__)


class Mailer(Protocol):
    def send_otp_email(self, to: str, name: str, code: str) -> None:
        ...


def build_otp_message(to: str, name: str, code: str, sender: str, ttl_minutes: int) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = "Your Library OTP Code"
    message["From"] = sender
    message["To"] = to
    message.set_content(
        f"Hello {name}, your OTP code is {code}. It expires in {ttl_minutes} minutes."
    )
    message.add_alternative(
        f"<p>Hello <strong>{name}</strong>,</p>"
        f'<p>Your OTP code is <strong style="font-size:18px">{code}</strong>.</p>'
        f"<p>It expires in {ttl_minutes} minutes.</p>",
        subtype="html",
    )
    return message


class SMTPMailer:
    """Mailer backed by a plain SMTP relay (STARTTLS + optional login)."""

    def __init__(self):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.timeout = settings.SMTP_TIMEOUT_SECONDS
        self.sender = settings.MAIL_FROM

    def _deliver(self, message: EmailMessage) -> None:
        if not self.host:
            raise MailDeliveryException("SMTP is not configured")
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP delivery failed", to=message["To"], error=str(e))
            raise MailDeliveryException() from e

    def send_otp_email(self, to: str, name: str, code: str) -> None:
        message = build_otp_message(to, name, code, self.sender, settings.OTP_EXPIRATION_MINUTES)
        self._deliver(message)
        logger.info("OTP email sent", to=to)
