"""S3 helpers for listing and uploading images."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from .errors import StorageError

logger = logging.getLogger(__name__)


class ObjectStore:
    """Thin wrapper around the S3 client for one bucket."""

    def __init__(self, bucket: str, client=None, region_name: Optional[str] = None) -> None:
        self._bucket = bucket
        self._s3 = client or boto3.client("s3", region_name=region_name)

    @property
    def bucket(self) -> str:
        return self._bucket

    def _iter_keys(self, prefix: str) -> Iterator[str]:
        token = None
        while True:
            params = {"Bucket": self._bucket, "Prefix": prefix}
            if token:
                params["ContinuationToken"] = token
            resp = self._s3.list_objects_v2(**params)
            for obj in resp.get("Contents", []):
                yield obj["Key"]
            token = resp.get("NextContinuationToken")
            if not resp.get("IsTruncated") or not token:
                break

    def list_keys(self, prefix: str) -> List[str]:
        """Return every object key under ``prefix`` in listing order."""
        try:
            return list(self._iter_keys(prefix))
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(
                f"error listing s3 objects (bucket: {self._bucket}, prefix: {prefix}): {exc}"
            ) from exc

    def upload_file(self, path: Path, key: str) -> None:
        try:
            self._s3.upload_file(str(path), self._bucket, key)
        except (BotoCoreError, ClientError, S3UploadFailedError) as exc:
            raise StorageError(f"error uploading {path} to s3://{self._bucket}/{key}: {exc}") from exc
        logger.info("Uploaded %s to s3://%s/%s", path, self._bucket, key)


__all__ = ["ObjectStore"]
