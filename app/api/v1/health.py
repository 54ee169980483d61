"""Liveness and readiness endpoints."""

from fastapi import APIRouter, Request

from app.api.deps import DbDep, SettingsDep
from app.api.responses import ok
from app.core.database import check_db_connected
from app.core.errors import error_response
from app.schemas.common import ApiResponse
from app.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=ApiResponse[HealthResponse])
def get_health(request: Request, settings: SettingsDep) -> ApiResponse[HealthResponse]:
    """Process is up. Used by load balancers; does not touch the database."""
    return ok(request, HealthResponse(environment=settings.APP_ENV))


@router.get("/ready", response_model=ApiResponse[ReadinessResponse])
def get_readiness(request: Request, db: DbDep):
    """Ready to serve: the database answers a trivial query. 503 NOT_READY otherwise."""
    if not check_db_connected(db):
        return error_response(request, 503, "NOT_READY", "Database is not reachable")
    return ok(request, ReadinessResponse())
