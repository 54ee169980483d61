"""Upload validation (size, MIME type, extension) and key generation on top of a Storage backend."""

import logging
import posixpath
from dataclasses import dataclass, field
from typing import BinaryIO

from app.core.clock import Clock, utcnow
from app.core.exceptions import UploadError, ValidationError
from app.models.base import new_id
from app.schemas.upload import StoredFile
from app.services.storage.base import Storage

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_BYTES = 10 * 1024 * 1024
MAX_FILES_PER_REQUEST = 10
FALLBACK_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadPolicy:
    """
    What the upload service accepts. Empty allow-lists accept everything.

    path_prefix is prepended to generated keys (e.g. "avatars/").
    """

    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    allowed_mime_types: frozenset[str] = field(
        default_factory=lambda: frozenset(
            {"image/jpeg", "image/png", "image/gif", "image/webp", "application/pdf"}
        )
    )
    allowed_extensions: frozenset[str] = field(
        default_factory=lambda: frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".pdf"})
    )
    path_prefix: str = ""

    @classmethod
    def images_only(cls) -> "UploadPolicy":
        return cls(
            max_file_bytes=5 * 1024 * 1024,
            allowed_mime_types=frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"}),
            allowed_extensions=frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"}),
        )


def _stream_size(stream: BinaryIO) -> int:
    pos = stream.tell()
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(pos)
    return size


class UploadService:
    def __init__(self, storage: Storage, policy: UploadPolicy | None = None, *, clock: Clock = utcnow) -> None:
        self.storage = storage
        self.policy = policy or UploadPolicy()
        self._clock = clock

    def generate_key(self, filename: str) -> str:
        """[prefix]YYYY/MM/DD/<uuid><ext>, the extension taken from the original name."""
        ext = posixpath.splitext(filename)[1]
        key = f"{self._clock():%Y/%m/%d}/{new_id()}{ext}"
        return self.policy.path_prefix + key

    def validate(self, filename: str, size: int, content_type: str) -> None:
        """Raise UploadError if the file breaks the policy."""
        policy = self.policy
        if policy.max_file_bytes > 0 and size > policy.max_file_bytes:
            raise UploadError(f"file too large: {size} bytes (max: {policy.max_file_bytes})")
        if policy.allowed_mime_types and content_type.lower() not in policy.allowed_mime_types:
            raise UploadError(f"file type not allowed: {content_type}")
        ext = posixpath.splitext(filename)[1].lower()
        if policy.allowed_extensions and ext not in policy.allowed_extensions:
            raise UploadError(f"file extension not allowed: {ext}")

    def upload_file(
        self,
        filename: str,
        stream: BinaryIO,
        content_type: str | None = None,
        size: int | None = None,
    ) -> StoredFile:
        """Validate and store one file; the result keeps the client's original filename."""
        content_type = content_type or FALLBACK_CONTENT_TYPE
        if size is None:
            size = _stream_size(stream)
        self.validate(filename, size, content_type)

        key = self.generate_key(filename)
        stream.seek(0)
        stored = self.storage.upload(key, stream, content_type)
        logger.info("File uploaded", extra={"key": key, "size": stored.size})
        return stored.model_copy(update={"original_name": filename})

    def delete_file(self, key: str) -> None:
        if not key:
            raise ValidationError("File key is required")
        self.storage.delete(key)

    def get_file_url(self, key: str) -> str:
        return self.storage.get_url(key)
