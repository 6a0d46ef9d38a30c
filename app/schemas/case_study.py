"""Request/response schemas for case study endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CaseStudyIn(BaseModel):
    """Body for create and update; all fields required and non-empty."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    tech_stack: list[str] = Field(..., alias="techStack", min_length=1)

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("tech_stack")
    @classmethod
    def clean_tech_stack(cls, v: list[str]) -> list[str]:
        items = [item.strip() for item in v if item and item.strip()]
        if not items:
            raise ValueError("must contain at least one technology")
        return items


class CaseStudyOut(BaseModel):
    """Case study as returned by the API (camelCase wire names)."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    title: str
    description: str
    tech_stack: list[str] = Field(default_factory=list, alias="techStack")
    content: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
