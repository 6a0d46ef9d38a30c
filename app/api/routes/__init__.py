"""API routes."""

from fastapi import APIRouter

from app.api.routes import auth, case_studies, health, upload

router = APIRouter()
router.include_router(auth.router, tags=["auth"])
router.include_router(case_studies.router, prefix="/case-studies", tags=["case-studies"])
router.include_router(upload.router, prefix="/case-studies", tags=["upload"])
router.include_router(health.router, tags=["health"])
