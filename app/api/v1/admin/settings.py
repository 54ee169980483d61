"""Admin settings routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_settings_service
from app.api.responses import ok
from app.schemas.admin import SettingResponse, UpdateSettingRequest, UpdateSettingsBatchRequest
from app.schemas.common import ApiResponse
from app.services.admin import SettingsService

router = APIRouter()

SettingsServiceDep = Annotated[SettingsService, Depends(get_settings_service)]


@router.get("", response_model=ApiResponse[list[SettingResponse]])
def list_settings(
    request: Request,
    service: SettingsServiceDep,
    group: str = "",
) -> ApiResponse[list[SettingResponse]]:
    """All settings ordered by group then key, or one group's settings when ?group= is given."""
    rows = service.get_by_group(group) if group else service.get_all()
    return ok(request, [SettingResponse.model_validate(r) for r in rows])


@router.put("", response_model=ApiResponse[list[SettingResponse]])
def update_settings(
    request: Request,
    body: UpdateSettingsBatchRequest,
    service: SettingsServiceDep,
) -> ApiResponse[list[SettingResponse]]:
    """Update several settings in one transaction; returns the full list."""
    rows = service.update_batch(body.settings)
    return ok(request, [SettingResponse.model_validate(r) for r in rows])


@router.get("/{key}", response_model=ApiResponse[SettingResponse])
def get_setting(request: Request, key: str, service: SettingsServiceDep) -> ApiResponse[SettingResponse]:
    return ok(request, SettingResponse.model_validate(service.get_by_key(key)))


@router.put("/{key}", response_model=ApiResponse[SettingResponse])
def update_setting(
    request: Request,
    key: str,
    body: UpdateSettingRequest,
    service: SettingsServiceDep,
) -> ApiResponse[SettingResponse]:
    return ok(request, SettingResponse.model_validate(service.update(key, body.value)))
