"""Credential store: user lookups and the conditional OTP updates."""

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StoreError
from app.models import User

logger = logging.getLogger(__name__)

_CLEARED_OTP = {"otp_code": None, "otp_expiry": None, "otp_attempts": 0}


def get_user_by_username(db: Session, username: str) -> User | None:
    try:
        return db.scalars(select(User).where(User.username == username)).first()
    except SQLAlchemyError as e:
        logger.exception("User lookup by username failed")
        raise StoreError() from e


def get_user_by_id(db: Session, user_id: str) -> User | None:
    try:
        return db.get(User, user_id)
    except SQLAlchemyError as e:
        logger.exception("User lookup by id failed")
        raise StoreError() from e


def _execute_and_commit(db: Session, stmt, action: str) -> int:
    try:
        result = db.execute(stmt)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("OTP update failed: %s", action)
        raise StoreError() from e
    return result.rowcount


def store_otp(db: Session, user_id: str, code: str, expiry: datetime) -> None:
    """Set a fresh pending code, replacing any previous one and resetting attempts."""
    stmt = (
        update(User)
        .where(User.id == user_id)
        .values(otp_code=code, otp_expiry=expiry, otp_attempts=0)
    )
    _execute_and_commit(db, stmt, "store")


def consume_otp(db: Session, user_id: str, code: str) -> bool:
    """
    Clear the pending code only if it still equals ``code``.

    Returns True for exactly one caller per issued code; a concurrent verify
    that lost the race sees zero affected rows.
    """
    stmt = (
        update(User)
        .where(User.id == user_id, User.otp_code == code)
        .values(**_CLEARED_OTP)
    )
    return _execute_and_commit(db, stmt, "consume") == 1


def clear_otp(db: Session, user_id: str, expected_code: str) -> None:
    """Drop a pending code (expired or out of attempts) if it has not changed meanwhile."""
    stmt = (
        update(User)
        .where(User.id == user_id, User.otp_code == expected_code)
        .values(**_CLEARED_OTP)
    )
    _execute_and_commit(db, stmt, "clear")


def record_failed_otp(
    db: Session, user_id: str, expected_code: str, max_attempts: int
) -> bool:
    """
    Count one failed attempt against the pending code.

    Returns True when the attempt budget is exhausted and the code was cleared.
    """
    try:
        db.execute(
            update(User)
            .where(User.id == user_id, User.otp_code == expected_code)
            .values(otp_attempts=User.otp_attempts + 1)
        )
        attempts = db.scalar(
            select(User.otp_attempts).where(
                User.id == user_id, User.otp_code == expected_code
            )
        )
        exhausted = attempts is not None and attempts >= max_attempts
        if exhausted:
            db.execute(
                update(User)
                .where(User.id == user_id, User.otp_code == expected_code)
                .values(**_CLEARED_OTP)
            )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("OTP update failed: record attempt")
        raise StoreError() from e
    return exhausted
