"""Request/response schemas for the upload endpoints."""

from datetime import datetime

from app.schemas.common import CamelModel


class StoredFile(CamelModel):
    """Metadata about a file held by a storage backend."""

    key: str
    original_name: str
    size: int
    content_type: str
    url: str
    created_at: datetime


class UploadResponse(CamelModel):
    file: StoredFile


class UploadedItem(CamelModel):
    filename: str
    file: StoredFile


class UploadFailure(CamelModel):
    filename: str
    error: str


class MultiUploadResponse(CamelModel):
    """Per-file outcome of a multi-file upload; one bad file does not fail the rest."""

    uploaded: list[UploadedItem]
    errors: list[UploadFailure]
