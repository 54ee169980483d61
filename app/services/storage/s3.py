"""S3 (and S3-compatible, e.g. MinIO) storage via boto3. URLs are presigned GETs."""

import logging
from typing import BinaryIO

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.clock import Clock, utcnow
from app.core.exceptions import NotFoundError, StorageError
from app.schemas.upload import StoredFile
from app.services.storage.base import Storage

logger = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _is_missing(error: ClientError) -> bool:
    return str(error.response.get("Error", {}).get("Code")) in _MISSING_CODES


class S3Storage(Storage):
    def __init__(
        self,
        bucket: str,
        *,
        region: str = "us-east-1",
        endpoint: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        presign_expires_in: int = 900,
        clock: Clock = utcnow,
    ) -> None:
        self.bucket = bucket
        self.presign_expires_in = presign_expires_in
        self._clock = clock
        kwargs = {"region_name": region}
        if endpoint:
            kwargs["endpoint_url"] = endpoint
        if access_key and secret_key:
            kwargs["aws_access_key_id"] = access_key
            kwargs["aws_secret_access_key"] = secret_key
        self.client = boto3.client("s3", **kwargs)

    def upload(self, key: str, stream: BinaryIO, content_type: str) -> StoredFile:
        stream.seek(0, 2)
        size = stream.tell()
        stream.seek(0)
        try:
            self.client.upload_fileobj(
                stream, self.bucket, key, ExtraArgs={"ContentType": content_type}
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload to S3: {e}") from e
        return StoredFile(
            key=key,
            original_name=key.rsplit("/", 1)[-1],
            size=size,
            content_type=content_type,
            url=self._presign(key),
            created_at=self._clock(),
        )

    def download(self, key: str) -> BinaryIO:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                raise NotFoundError(f"File not found: {key}") from e
            raise StorageError(f"Failed to download from S3: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to download from S3: {e}") from e
        return response["Body"]

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete from S3: {e}") from e

    def get_url(self, key: str) -> str:
        return self._presign(key)

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                return False
            raise StorageError(f"Failed to check S3 object: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to check S3 object: {e}") from e
        return True

    def _presign(self, key: str) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=self.presign_expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to presign URL: {e}") from e
