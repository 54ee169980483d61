"""Success envelope helper shared by the routers."""

from typing import TypeVar

from fastapi import Request

from app.core.middleware import request_meta
from app.schemas.common import ApiResponse

T = TypeVar("T")


def ok(request: Request, data: T) -> ApiResponse[T]:
    """Wrap data as {success: true, data, meta}."""
    return ApiResponse(data=data, meta=request_meta(request))
