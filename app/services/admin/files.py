"""Admin browsing of the local upload directory: list and delete, confined to UPLOAD_DIR."""

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from app.core.exceptions import NotFoundError, StorageError, ValidationError
from app.schemas.admin import FileEntry, FileListing

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "zip": "application/zip",
    "txt": "text/plain",
    "json": "application/json",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mp3": "audio/mpeg",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def mime_type_for(extension: str) -> str:
    return MIME_TYPES.get(extension.lower(), DEFAULT_MIME_TYPE)


def clean_relative(path: str, *, what: str) -> str:
    """Normalise a client-supplied relative path; '' means the root. Rejects any '..'."""
    cleaned = str(PurePosixPath("/", path.strip())).lstrip("/")
    if ".." in path or ".." in cleaned:
        raise ValidationError(f"Invalid {what} path", code="VALIDATION_ERROR")
    return cleaned


class FilesService:
    def __init__(self, upload_dir: str | Path) -> None:
        self.root = Path(upload_dir).resolve()

    def _resolve(self, relative: str) -> Path:
        full = (self.root / relative).resolve() if relative else self.root
        if full != self.root and self.root not in full.parents:
            raise ValidationError("Invalid path")
        return full

    def list_dir(self, directory: str = "") -> FileListing:
        """List one directory level. A missing directory is an empty listing."""
        sub = clean_relative(directory, what="directory")
        target = self._resolve(sub)
        if not target.is_dir():
            return FileListing(files=[], total=0, total_size=0, current_dir=sub)

        files: list[FileEntry] = []
        total_size = 0
        try:
            entries = sorted(target.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise StorageError("Failed to read directory") from e
        for entry in entries:
            try:
                stat = entry.stat()
            except OSError:
                continue
            is_dir = entry.is_dir()
            ext = "" if is_dir else entry.suffix.lstrip(".")
            if not is_dir:
                total_size += stat.st_size
            files.append(
                FileEntry(
                    name=entry.name,
                    path=f"{sub}/{entry.name}" if sub else entry.name,
                    size=stat.st_size,
                    is_dir=is_dir,
                    mod_time=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                    extension=ext,
                    mime_type=mime_type_for(ext) if not is_dir else "",
                )
            )
        return FileListing(files=files, total=len(files), total_size=total_size, current_dir=sub)

    def delete(self, path: str) -> None:
        """Delete a file, or a directory with its contents."""
        rel = clean_relative(path, what="file")
        if not rel:
            raise ValidationError("File path is required")
        target = self._resolve(rel)
        if not target.exists():
            raise NotFoundError("File not found")
        try:
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as e:
            raise StorageError("Failed to delete file") from e
        logger.info("Admin deleted upload", extra={"path": rel})
