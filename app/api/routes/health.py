"""Health check endpoint that probes the database on every call."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get(
    "/health-check",
    response_model=HealthResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": HealthResponse}},
)
def get_health(db: Session = Depends(get_db)) -> HealthResponse | JSONResponse:
    """
    Return 200 when `SELECT 1` succeeds and 503 otherwise.
    Used by load balancers and monitoring.
    """
    if check_db_connected(db):
        return HealthResponse(status="ok", message="Database connection successful")
    body = HealthResponse(status="error", message="Database connection failed")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )
