"""ORM model for application users (credentials, admin flag and pending OTP)."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.models.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    User account for the OTP admin login.

    otp_code and otp_expiry are either both NULL or both set; otp_attempts counts
    failed verifications against the pending code and resets with it.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    otp_code = Column(String(6), nullable=True)
    otp_expiry = Column(DateTime(timezone=True), nullable=True)
    otp_attempts = Column(Integer, nullable=False, default=0)
