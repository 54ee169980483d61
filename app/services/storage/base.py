"""Storage capability interface shared by the local disk and S3 backends."""

from abc import ABC, abstractmethod
from typing import BinaryIO

from app.schemas.upload import StoredFile


class Storage(ABC):
    """Abstract interface all storage backends implement. Keys are '/'-separated relative paths."""

    @abstractmethod
    def upload(self, key: str, stream: BinaryIO, content_type: str) -> StoredFile:
        """Store stream under key and return its metadata (including an access URL)."""

    @abstractmethod
    def download(self, key: str) -> BinaryIO:
        """Open the stored object for reading. Raises NotFoundError when missing."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the object. Deleting a missing key is not an error."""

    @abstractmethod
    def get_url(self, key: str) -> str:
        """URL at which the object can be fetched. Raises NotFoundError when missing."""

    @abstractmethod
    def exists(self, key: str) -> bool: ...
