"""Local filesystem storage; files are served by the app under UPLOAD_BASE_URL."""

import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from app.core.clock import Clock, utcnow
from app.core.exceptions import NotFoundError, StorageError, ValidationError
from app.schemas.upload import StoredFile
from app.services.storage.base import Storage

logger = logging.getLogger(__name__)


class LocalStorage(Storage):
    def __init__(self, base_path: str | Path, base_url: str, *, clock: Clock = utcnow) -> None:
        self.base_path = Path(base_path).resolve()
        self.base_url = base_url.rstrip("/")
        self._clock = clock

    def path_for(self, key: str) -> Path:
        """Resolve key under base_path; keys escaping the base directory are rejected."""
        full = (self.base_path / key).resolve()
        if full != self.base_path and self.base_path not in full.parents:
            raise ValidationError("Invalid file key", code="INVALID_PATH")
        return full

    def upload(self, key: str, stream: BinaryIO, content_type: str) -> StoredFile:
        full = self.path_for(key)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to create directory: {e}") from e
        try:
            with full.open("wb") as out:
                shutil.copyfileobj(stream, out)
        except OSError as e:
            full.unlink(missing_ok=True)
            raise StorageError(f"Failed to write file: {e}") from e
        return StoredFile(
            key=key,
            original_name=full.name,
            size=full.stat().st_size,
            content_type=content_type,
            url=f"{self.base_url}/{key}",
            created_at=self._clock(),
        )

    def download(self, key: str) -> BinaryIO:
        full = self.path_for(key)
        try:
            return full.open("rb")
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {key}") from e
        except OSError as e:
            raise StorageError(f"Failed to open file: {e}") from e

    def delete(self, key: str) -> None:
        full = self.path_for(key)
        try:
            full.unlink()
        except FileNotFoundError:
            logger.debug("Delete of missing file ignored: %s", key)
        except OSError as e:
            raise StorageError(f"Failed to delete file: {e}") from e

    def get_url(self, key: str) -> str:
        if not self.exists(key):
            raise NotFoundError(f"File not found: {key}")
        return f"{self.base_url}/{key}"

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()
