"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import admin, auth, health, password_reset, upload

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(password_reset.router, prefix="/auth", tags=["auth"])
router.include_router(upload.router, prefix="/upload", tags=["upload"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
