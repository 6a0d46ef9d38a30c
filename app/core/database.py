"""Database engine, per-request sessions and startup initialization."""

import logging
from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database probe failed: %s", e)
        return False


def init_db(bind: Engine | None = None) -> bool:
    """
    Create missing tables and probe the connection. Safe to call repeatedly.

    Returns False (after logging) when the database is unreachable; the process
    keeps serving and the health check reports the live state.
    """
    from app.models import Base

    bind = bind or engine
    try:
        Base.metadata.create_all(bind=bind, checkfirst=True)
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database initialization failed: %s", e)
        return False
    logger.info("Database connected successfully")
    return True
