"""ORM model for portfolio case studies."""

import uuid

from sqlalchemy import JSON, Column, DateTime, String, Text, func

from app.models.base import Base


class CaseStudy(Base):
    """A portfolio entry; content holds HTML rendered from an uploaded notebook."""

    __tablename__ = "case_studies"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    tech_stack = Column(JSON, nullable=False, default=list)
    content = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
