"""Two-step admin login: password check issues an emailed OTP; OTP check yields a user for token minting."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.errors import (
    InvalidCredentials,
    InvalidOtp,
    InvalidUser,
    NotificationFailure,
    OtpExpiredOrMissing,
)
from app.core.security import generate_otp, hash_password, verify_password
from app.services import users
from app.services.notifier import NotificationError, Notifier

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

EMAIL_MASK = "****"
EMAIL_VISIBLE_CHARS = 3


@dataclass(frozen=True)
class OtpRequestResult:
    masked_email: str
    request_id: str


@dataclass(frozen=True)
class VerifiedUser:
    id: str
    username: str
    is_admin: bool


def utc_now() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


def otp_matches(submitted: str, stored: str) -> bool:
    return secrets.compare_digest(submitted.encode("utf-8"), stored.encode("utf-8"))


def mask_email(email: str) -> str:
    """Keep the first three characters of the local part and the domain: abc****@domain.com."""
    local, sep, domain = email.partition("@")
    if not sep:
        return EMAIL_MASK
    return f"{local[:EMAIL_VISIBLE_CHARS]}{EMAIL_MASK}@{domain}"


def request_otp(
    db: Session,
    notifier: Notifier,
    username: str,
    password: str,
    settings: Settings,
) -> OtpRequestResult:
    """
    Validate admin credentials, email a fresh OTP and persist it.

    The code is stored only after the notifier confirms delivery, so a failed
    send never leaves an unusable code on the account.
    """
    user = users.get_user_by_username(db, username)
    if user is None or not user.is_admin:
        # Same bcrypt cost as a real check so response time does not reveal admin usernames.
        verify_password(password, _dummy_password_hash())
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials()

    code = generate_otp()
    expiry = utc_now() + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)

    try:
        notifier.send_otp(user.email, code, settings.OTP_EXPIRE_MINUTES)
    except NotificationError as e:
        logger.error("OTP delivery failed for user_id=%s: %s", user.id, e.message)
        raise NotificationFailure() from e

    users.store_otp(db, user.id, code, expiry)
    logger.info("OTP issued", extra={"user_id": user.id, "otp_expiry": expiry.isoformat()})
    return OtpRequestResult(masked_email=mask_email(user.email), request_id=user.id)


def verify_otp(
    db: Session,
    request_id: str,
    submitted_otp: str,
    settings: Settings,
) -> VerifiedUser:
    """
    Check the submitted code and consume it.

    A code expiring exactly now counts as expired. Consumption is a conditional
    update, so the same code verifies at most once even under concurrent calls.
    """
    user = users.get_user_by_id(db, request_id)
    if user is None:
        raise InvalidUser()

    stored_code = user.otp_code
    if stored_code is None or user.otp_expiry is None:
        raise OtpExpiredOrMissing()
    if utc_now() >= _as_utc(user.otp_expiry):
        users.clear_otp(db, user.id, stored_code)
        raise OtpExpiredOrMissing()

    if not otp_matches(submitted_otp, stored_code):
        exhausted = users.record_failed_otp(
            db, user.id, stored_code, settings.OTP_MAX_ATTEMPTS
        )
        if exhausted:
            logger.warning("OTP attempts exhausted; pending code cleared for user_id=%s", user.id)
        raise InvalidOtp()

    # Snapshot before the commit inside consume_otp expires the instance.
    verified = VerifiedUser(id=user.id, username=user.username, is_admin=bool(user.is_admin))
    if not users.consume_otp(db, user.id, submitted_otp):
        raise OtpExpiredOrMissing()
    logger.info("OTP verified", extra={"user_id": verified.id})
    return verified
