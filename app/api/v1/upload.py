"""Upload endpoints: single and multi-file multipart uploads, delete by key. Authenticated users only."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Request, UploadFile, status

from app.api.deps import get_upload_service
from app.api.responses import ok
from app.api.v1.auth import CurrentUserDep
from app.core.exceptions import AppError, ValidationError
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.upload import MultiUploadResponse, UploadedItem, UploadFailure, UploadResponse
from app.services.upload import MAX_FILES_PER_REQUEST, UploadService

logger = logging.getLogger(__name__)

router = APIRouter()

UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]


def _store(service: UploadService, upload: UploadFile):
    return service.upload_file(
        upload.filename or "",
        upload.file,
        content_type=upload.content_type,
        size=upload.size,
    )


@router.post("", response_model=ApiResponse[UploadResponse], status_code=status.HTTP_201_CREATED)
def upload_single(
    request: Request,
    _user: CurrentUserDep,
    service: UploadServiceDep,
    file: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse[UploadResponse]:
    """
    Upload one file as multipart/form-data under the field `file`.

    The file must pass the size, MIME type and extension checks. Returns the
    stored key and a URL for fetching it.
    """
    if file is None:
        raise ValidationError("No file provided")
    return ok(request, UploadResponse(file=_store(service, file)))


@router.post(
    "/multiple",
    response_model=ApiResponse[MultiUploadResponse],
    status_code=status.HTTP_201_CREATED,
)
def upload_multiple(
    request: Request,
    _user: CurrentUserDep,
    service: UploadServiceDep,
    files: Annotated[list[UploadFile] | None, File()] = None,
) -> ApiResponse[MultiUploadResponse]:
    """Upload up to 10 files under the field `files`; each file succeeds or fails on its own."""
    if not files:
        raise ValidationError("No files provided")
    if len(files) > MAX_FILES_PER_REQUEST:
        raise ValidationError(f"Too many files (max: {MAX_FILES_PER_REQUEST})")

    uploaded: list[UploadedItem] = []
    errors: list[UploadFailure] = []
    for upload in files:
        filename = upload.filename or ""
        try:
            stored = _store(service, upload)
        except AppError as e:
            logger.warning("Upload rejected: %s", e.message, extra={"upload_filename": filename})
            errors.append(UploadFailure(filename=filename, error=e.message))
            continue
        uploaded.append(UploadedItem(filename=filename, file=stored))
    return ok(request, MultiUploadResponse(uploaded=uploaded, errors=errors))


@router.delete("/{key:path}", response_model=ApiResponse[MessageResponse])
def delete_upload(
    request: Request,
    key: str,
    _user: CurrentUserDep,
    service: UploadServiceDep,
) -> ApiResponse[MessageResponse]:
    service.delete_file(key)
    return ok(request, MessageResponse(message="File deleted successfully"))
