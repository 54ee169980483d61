"""Admin routes; every route requires an authenticated admin."""

from fastapi import APIRouter, Depends

from app.api.v1.admin import dashboard, files, settings, users
from app.api.v1.auth import require_admin

router = APIRouter(dependencies=[Depends(require_admin)])
router.include_router(dashboard.router, prefix="/dashboard")
router.include_router(users.router, prefix="/users")
router.include_router(settings.router, prefix="/settings")
router.include_router(files.router, prefix="/files")
