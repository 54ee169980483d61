"""Admin routes for browsing and deleting files in the local upload directory."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.deps import get_files_service
from app.api.responses import ok
from app.schemas.admin import FileListing
from app.schemas.common import ApiResponse, MessageResponse
from app.services.admin import FilesService

router = APIRouter()

FilesServiceDep = Annotated[FilesService, Depends(get_files_service)]


@router.get("", response_model=ApiResponse[FileListing])
def list_files(
    request: Request,
    service: FilesServiceDep,
    directory: Annotated[str, Query(alias="dir")] = "",
) -> ApiResponse[FileListing]:
    return ok(request, service.list_dir(directory))


@router.delete("/{path:path}", response_model=ApiResponse[MessageResponse])
def delete_file(request: Request, path: str, service: FilesServiceDep) -> ApiResponse[MessageResponse]:
    service.delete(path)
    return ok(request, MessageResponse(message="File deleted successfully"))
