"""OTP email delivery: SMTP sender and a log-only sender for local development."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your Admin Login OTP"

_OTP_HTML = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #4a5568;">Portfolio Admin Login OTP</h2>
  <p>Your one-time password for admin login is:</p>
  <div style="background-color: #f7fafc; padding: 20px; border-radius: 6px; text-align: center;">
    <h1 style="font-size: 36px; margin: 0; color: #2d3748; letter-spacing: 8px;">{code}</h1>
  </div>
  <p style="color: #718096; margin-top: 20px;">This OTP will expire in {minutes} minutes.</p>
  <p style="color: #718096;">If you didn't request this OTP, please ignore this email.</p>
</div>
"""


class NotificationError(Exception):
    """Raised when an OTP email definitively could not be delivered."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class Notifier(Protocol):
    def send_otp(self, to_email: str, code: str, expires_in_minutes: int) -> None:
        """Deliver the code; raise NotificationError on failure."""
        ...


def build_otp_message(
    sender: str, to_email: str, code: str, expires_in_minutes: int
) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = OTP_SUBJECT
    msg["From"] = sender
    msg["To"] = to_email
    msg.set_content(
        f"Your one-time password for admin login is: {code}\n"
        f"This OTP will expire in {expires_in_minutes} minutes.\n"
    )
    msg.add_alternative(
        _OTP_HTML.format(code=code, minutes=expires_in_minutes), subtype="html"
    )
    return msg


class SmtpNotifier:
    """Sends OTP emails over SMTP with a bounded connection timeout."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def _is_configured(self) -> bool:
        s = self.settings
        return bool(s.SMTP_HOST and s.SMTP_USERNAME and s.SMTP_PASSWORD and s.smtp_sender)

    def send_otp(self, to_email: str, code: str, expires_in_minutes: int) -> None:
        if not self._is_configured():
            raise NotificationError("SMTP is not configured (SMTP_USERNAME, SMTP_PASSWORD).")
        s = self.settings
        msg = build_otp_message(s.smtp_sender, to_email, code, expires_in_minutes)
        try:
            with smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=s.SMTP_TIMEOUT_SEC) as smtp:
                if s.SMTP_USE_TLS:
                    smtp.starttls()
                smtp.login(s.SMTP_USERNAME, s.SMTP_PASSWORD.get_secret_value())
                refused = smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP delivery failed: {e!s}") from e
        if refused:
            raise NotificationError(f"SMTP server refused recipients: {sorted(refused)}")
        logger.info("OTP email sent", extra={"smtp_host": s.SMTP_HOST})

    def verify(self) -> bool:
        """Connect and log in without sending anything; True when the server accepts the credentials."""
        if not self._is_configured():
            return False
        s = self.settings
        try:
            with smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=s.SMTP_TIMEOUT_SEC) as smtp:
                if s.SMTP_USE_TLS:
                    smtp.starttls()
                smtp.login(s.SMTP_USERNAME, s.SMTP_PASSWORD.get_secret_value())
                smtp.noop()
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP check against %s failed: %s", s.SMTP_HOST, e)
            return False
        return True


class LogOnlyNotifier:
    """Logs the code instead of sending it. Only wired in when APP_ENV=dev and SMTP is unset."""

    def send_otp(self, to_email: str, code: str, expires_in_minutes: int) -> None:
        logger.warning(
            "SMTP not configured; dev OTP for %s is %s (expires in %d min)",
            to_email,
            code,
            expires_in_minutes,
        )


def get_notifier() -> Notifier:
    """Dependency: SMTP sender, or the log-only sender in dev without SMTP credentials."""
    from app.core.config import get_settings

    settings = get_settings()
    if settings.APP_ENV == "dev" and not settings.SMTP_USERNAME:
        return LogOnlyNotifier()
    return SmtpNotifier(settings)


def check_email_transport(settings: Settings) -> bool:
    """Startup check: log whether OTP email can be delivered. Never raises."""
    if settings.APP_ENV == "dev" and not settings.SMTP_USERNAME:
        logger.warning("SMTP not configured; OTP codes will be written to the log")
        return False
    if SmtpNotifier(settings).verify():
        logger.info("SMTP ready at %s:%s", settings.SMTP_HOST, settings.SMTP_PORT)
        return True
    logger.error("SMTP is not ready; admin login emails will fail until it is fixed")
    return False
