"""Response schema for the notebook upload endpoint."""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """Notebook converted and stored on the case study."""

    success: bool = True
    message: str = Field(
        default="Notebook uploaded and associated with case study",
    )
