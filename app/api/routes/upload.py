"""Notebook upload: convert an .ipynb file to HTML and attach it to a case study."""

from typing import Annotated

from fastapi import APIRouter, Depends, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.api.routes.auth import require_admin
from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import ValidationError
from app.schemas.auth import CurrentUser
from app.schemas.upload import UploadResponse
from app.services import case_studies
from app.services.notebook import NOTEBOOK_EXTENSION, convert_notebook_to_html

router = APIRouter()


@router.post("/{study_id}/upload", response_model=UploadResponse)
async def upload_notebook(
    study_id: str,
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    file: UploadFile | None = None,
) -> UploadResponse:
    """
    Accept a Jupyter notebook as multipart field `file`, convert it to HTML
    with nbconvert and store the HTML as the case study's content.
    """
    settings = get_settings()
    # Fail fast on unknown ids before reading or converting anything.
    await run_in_threadpool(case_studies.get_case_study, db, study_id, settings)

    if file is None:
        raise ValidationError("No file uploaded")
    filename = file.filename or ""
    if not filename.lower().endswith(NOTEBOOK_EXTENSION):
        raise ValidationError("Uploaded file must have a .ipynb extension")
    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File size must not exceed {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB"
        )

    html = await run_in_threadpool(convert_notebook_to_html, content, study_id, settings)
    await run_in_threadpool(case_studies.set_case_study_content, db, study_id, html)
    return UploadResponse()
