"""Password hashing, OTP generation and session token creation/verification."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Length limits applied when provisioning users.
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

OTP_LENGTH = 6
OTP_MIN = 10 ** (OTP_LENGTH - 1)
OTP_MAX = 10**OTP_LENGTH - 1

# Claims every session token must carry.
REQUIRED_TOKEN_CLAIMS = ("sub", "username", "isAdmin", "iat", "exp")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def generate_otp() -> str:
    """Return a 6-digit code drawn uniformly from [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def create_session_token(
    user_id: str,
    username: str,
    is_admin: bool,
    now: datetime | None = None,
) -> str:
    """Create a signed session token carrying the user id, username and admin flag."""
    now = now or datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "id": str(user_id),
        "username": username,
        "isAdmin": bool(is_admin),
        "iat": now,
        "exp": expire,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a session token; return its payload.
    Raises jwt.PyJWTError on bad signature, expiry or missing claims.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": list(REQUIRED_TOKEN_CLAIMS)},
    )
