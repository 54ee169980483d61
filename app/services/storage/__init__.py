"""File storage backends."""

from typing import TYPE_CHECKING

from app.services.storage.base import Storage
from app.services.storage.local import LocalStorage
from app.services.storage.s3 import S3Storage

if TYPE_CHECKING:
    from app.core.config import Settings


def build_storage(settings: "Settings") -> Storage:
    """Select the backend named by STORAGE_BACKEND."""
    if settings.STORAGE_BACKEND == "s3":
        return S3Storage(
            settings.S3_BUCKET,
            region=settings.S3_REGION,
            endpoint=settings.S3_ENDPOINT,
            access_key=settings.S3_ACCESS_KEY,
            secret_key=settings.S3_SECRET_KEY.get_secret_value() if settings.S3_SECRET_KEY else None,
            presign_expires_in=settings.S3_PRESIGN_EXPIRE_SEC,
        )
    return LocalStorage(settings.UPLOAD_DIR, settings.UPLOAD_BASE_URL)


__all__ = ["LocalStorage", "S3Storage", "Storage", "build_storage"]
