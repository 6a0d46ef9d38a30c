"""Case study CRUD: public reads, admin-only writes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.routes.auth import require_admin
from app.core.config import get_settings
from app.core.database import get_db
from app.schemas.auth import CurrentUser, MessageResponse
from app.schemas.case_study import CaseStudyIn, CaseStudyOut
from app.services import case_studies

router = APIRouter()


@router.get("", response_model=list[CaseStudyOut])
def list_case_studies(
    db: Annotated[Session, Depends(get_db)],
) -> list[CaseStudyOut]:
    """All case studies, oldest first."""
    rows = case_studies.list_case_studies(db, get_settings())
    return [CaseStudyOut.model_validate(row) for row in rows]


@router.get("/{study_id}", response_model=CaseStudyOut)
def get_case_study(
    study_id: str,
    db: Annotated[Session, Depends(get_db)],
) -> CaseStudyOut:
    return CaseStudyOut.model_validate(
        case_studies.get_case_study(db, study_id, get_settings())
    )


@router.post("", response_model=CaseStudyOut, status_code=status.HTTP_201_CREATED)
def create_case_study(
    body: CaseStudyIn,
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[CurrentUser, Depends(require_admin)],
) -> CaseStudyOut:
    """Create a case study. Requires title, description and techStack."""
    return CaseStudyOut.model_validate(case_studies.create_case_study(db, body))


@router.put("/{study_id}", response_model=CaseStudyOut)
def update_case_study(
    study_id: str,
    body: CaseStudyIn,
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[CurrentUser, Depends(require_admin)],
) -> CaseStudyOut:
    """Replace title, description and techStack of an existing case study."""
    return CaseStudyOut.model_validate(
        case_studies.update_case_study(db, study_id, body)
    )


@router.delete("/{study_id}", response_model=MessageResponse)
def delete_case_study(
    study_id: str,
    db: Annotated[Session, Depends(get_db)],
    _admin: Annotated[CurrentUser, Depends(require_admin)],
) -> MessageResponse:
    case_studies.delete_case_study(db, study_id)
    return MessageResponse(message="Case study deleted successfully")
