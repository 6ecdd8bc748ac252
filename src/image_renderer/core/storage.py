"""Storage backends the renderer persists encoded images into."""

import os
from typing import Any, Optional

from botocore.exceptions import ClientError

from .image_utils import extract_extension
from .logging_config import get_logger
from .models import TargetFormat

# S3Client type for annotations only
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client
else:
    S3Client = Any

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")
_ALREADY_EXISTS_CODES = ("PreconditionFailed", "412", "ConditionalRequestConflict")


class LocalFileStorage:
    """Local filesystem storage, paths are relative to the working directory."""

    def __init__(self, root: Optional[str] = None):
        self._root = root

    def _resolve(self, path: str) -> str:
        if self._root and not os.path.isabs(path):
            return os.path.join(self._root, path)
        return path

    def exists(self, path: str) -> bool:
        return os.path.isfile(self._resolve(path))

    def create_directory(self, path: str) -> None:
        os.makedirs(self._resolve(path), exist_ok=True)

    def write_new_file(self, path: str, data: bytes) -> None:
        resolved = self._resolve(path)
        # "x" refuses to open a path that already exists
        handle = open(resolved, "xb")
        try:
            with handle:
                handle.write(data)
        except OSError:
            # flush on close can fail too, so clean up after the with block
            os.remove(resolved)
            raise

    def delete(self, path: str) -> None:
        os.remove(self._resolve(path))


def _content_type_for(key: str) -> str:
    ext = extract_extension(key)
    if ext == "jpg":
        ext = "jpeg"
    try:
        return TargetFormat(ext).content_type
    except ValueError:
        return "application/octet-stream"


class S3Storage:
    """S3 storage keyed by path; directories are implicit."""

    def __init__(self, s3_client: S3Client, bucket: str, prefix: str = ""):
        self._s3_client = s3_client
        self._bucket = bucket
        self._prefix = prefix.strip("/")
        self._logger = get_logger("image-renderer.storage")

    def _key(self, path: str) -> str:
        path = path.lstrip("/")
        if self._prefix:
            return f"{self._prefix}/{path}"
        return path

    def exists(self, path: str) -> bool:
        try:
            self._s3_client.head_object(Bucket=self._bucket, Key=self._key(path))
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                return False
            raise

    def create_directory(self, path: str) -> None:
        self._logger.debug(f"S3 has no directories, skipping create of {path}")

    def write_new_file(self, path: str, data: bytes) -> None:
        key = self._key(path)
        self._logger.debug(f"Uploading to s3://{self._bucket}/{key}")
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=_content_type_for(key),
                IfNoneMatch="*",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _ALREADY_EXISTS_CODES:
                raise FileExistsError(f"s3://{self._bucket}/{key} already exists") from e
            raise

    def delete(self, path: str) -> None:
        key = self._key(path)
        self._logger.debug(f"Deleting s3://{self._bucket}/{key}")
        self._s3_client.delete_object(Bucket=self._bucket, Key=key)
