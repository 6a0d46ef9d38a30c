"""Case study persistence. Public reads retry on connection errors; writes never retry."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.errors import NotFound, StoreError
from app.models import CaseStudy
from app.schemas.case_study import CaseStudyIn

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

NOT_FOUND_MESSAGE = "Case study not found"


def _read_with_retry(db: Session, settings: Settings, read: Callable[[], T]) -> T:
    """Run an idempotent read, retrying OperationalError with exponential backoff."""

    def attempt() -> T:
        try:
            return read()
        except OperationalError:
            # Discard the failed transaction so the next attempt gets a fresh connection.
            db.rollback()
            raise

    retrying = Retrying(
        stop=stop_after_attempt(settings.DB_READ_RETRIES),
        wait=wait_exponential(multiplier=settings.DB_READ_RETRY_BASE_SEC),
        retry=retry_if_exception_type(OperationalError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    try:
        return retrying(attempt)
    except SQLAlchemyError as e:
        logger.exception("Case study read failed")
        raise StoreError() from e


def _get_or_404(db: Session, study_id: str) -> CaseStudy:
    study = db.get(CaseStudy, study_id)
    if study is None:
        raise NotFound(NOT_FOUND_MESSAGE)
    return study


def list_case_studies(db: Session, settings: Settings) -> list[CaseStudy]:
    return _read_with_retry(
        db,
        settings,
        lambda: list(db.scalars(select(CaseStudy).order_by(CaseStudy.created_at))),
    )


def get_case_study(db: Session, study_id: str, settings: Settings) -> CaseStudy:
    study = _read_with_retry(db, settings, lambda: db.get(CaseStudy, study_id))
    if study is None:
        raise NotFound(NOT_FOUND_MESSAGE)
    return study


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Case study %s failed", action)
        raise StoreError() from e


def create_case_study(db: Session, data: CaseStudyIn) -> CaseStudy:
    study = CaseStudy(
        title=data.title,
        description=data.description,
        tech_stack=data.tech_stack,
    )
    db.add(study)
    _commit(db, "create")
    db.refresh(study)
    logger.info("Case study created", extra={"case_study_id": study.id})
    return study


def update_case_study(db: Session, study_id: str, data: CaseStudyIn) -> CaseStudy:
    study = _get_or_404(db, study_id)
    study.title = data.title
    study.description = data.description
    study.tech_stack = data.tech_stack
    _commit(db, "update")
    db.refresh(study)
    return study


def delete_case_study(db: Session, study_id: str) -> None:
    study = _get_or_404(db, study_id)
    db.delete(study)
    _commit(db, "delete")
    logger.info("Case study deleted", extra={"case_study_id": study_id})


def set_case_study_content(db: Session, study_id: str, html: str) -> None:
    """Store converted notebook HTML on an existing case study."""
    study = _get_or_404(db, study_id)
    study.content = html
    _commit(db, "content update")
