"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthStatusResponse,
    CurrentUser,
    MessageResponse,
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    TokenResponse,
)
from app.schemas.case_study import CaseStudyIn, CaseStudyOut
from app.schemas.health import HealthResponse
from app.schemas.upload import UploadResponse

__all__ = [
    "AuthStatusResponse",
    "CaseStudyIn",
    "CaseStudyOut",
    "CurrentUser",
    "HealthResponse",
    "MessageResponse",
    "OtpRequest",
    "OtpRequestResponse",
    "OtpVerifyRequest",
    "TokenResponse",
    "UploadResponse",
]
