"""Admin dashboard route."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_dashboard_service
from app.api.responses import ok
from app.schemas.admin import DashboardStats
from app.schemas.common import ApiResponse
from app.services.admin import DashboardService

router = APIRouter()


@router.get("", response_model=ApiResponse[DashboardStats])
def get_stats(
    request: Request,
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> ApiResponse[DashboardStats]:
    return ok(request, service.get_stats())
