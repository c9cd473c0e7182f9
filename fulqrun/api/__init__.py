"""API router for v1 endpoints."""

from fastapi import APIRouter

from fulqrun.api import qualification, qualification_admin

router = APIRouter()

# Scoring, opportunity qualification and stage gates
router.include_router(qualification.router, tags=["qualification"])

# Admin configuration management
router.include_router(
    qualification_admin.router,
    prefix="/admin/qualification-config",
    tags=["admin"],
)
