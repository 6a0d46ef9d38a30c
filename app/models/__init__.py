"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.case_study import CaseStudy
from app.models.user import User

__all__ = ["Base", "CaseStudy", "User"]
