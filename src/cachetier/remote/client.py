"""S3 remote backend client: bucket probe, object probe, transfer, listing.

boto3 is synchronous; every call runs in a worker thread so the coordinator
can await it like any other step.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from cachetier.exceptions import RemoteBackendError

log = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3RemoteClient:
    """Thin async wrapper over a boto3 S3 client.

    No state is kept between calls apart from the underlying client.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        endpoint_url: str = "",
        upload_chunk_size: Optional[int] = None,
        boto3_client: Any | None = None,
    ) -> None:
        if boto3_client is not None:
            self._s3 = boto3_client
        else:
            client_kwargs: dict[str, Any] = {"region_name": region}
            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url
            self._s3 = boto3.client("s3", **client_kwargs)
        self._upload_chunk_size = upload_chunk_size

    async def bucket_reachable(self, bucket: str) -> bool:
        """Check the bucket exists and is accessible. Never raises."""
        try:
            await asyncio.to_thread(self._s3.head_bucket, Bucket=bucket)
        except ClientError as e:
            log.warning("Bucket %s does not exist or is not accessible: %s", bucket, e)
            return False
        except Exception as e:
            log.warning("Error checking bucket existence: %s", e)
            return False
        log.info("Successfully connected to bucket: %s", bucket)
        return True

    async def object_exists(self, bucket: str, object_path: str) -> bool:
        """Probe a single object. A missing object is False, any other error raises."""
        try:
            await asyncio.to_thread(self._s3.head_object, Bucket=bucket, Key=object_path)
        except ClientError as e:
            if _error_code(e) in _MISSING_CODES:
                return False
            raise RemoteBackendError(
                f"Error checking object existence at s3://{bucket}/{object_path}: {e}",
                bucket=bucket,
                object_path=object_path,
            ) from e
        except BotoCoreError as e:
            raise RemoteBackendError(
                f"Error checking object existence at s3://{bucket}/{object_path}: {e}",
                bucket=bucket,
                object_path=object_path,
            ) from e
        return True

    async def download(self, bucket: str, object_path: str, destination: Path) -> None:
        """Stream an object to ``destination``."""
        log.info("Downloading from s3://%s/%s", bucket, object_path)
        try:
            await asyncio.to_thread(
                self._s3.download_file,
                Bucket=bucket,
                Key=object_path,
                Filename=str(destination),
            )
        except (ClientError, BotoCoreError, OSError) as e:
            raise RemoteBackendError(
                f"Failed to download s3://{bucket}/{object_path}: {e}",
                bucket=bucket,
                object_path=object_path,
            ) from e

    async def upload(
        self,
        bucket: str,
        local_file: Path,
        object_path: str,
        metadata: dict[str, str],
        upload_chunk_size: Optional[int] = None,
    ) -> None:
        """Stream ``local_file`` to ``object_path`` with user metadata attached."""
        chunk_size = upload_chunk_size or self._upload_chunk_size
        upload_kwargs: dict[str, Any] = {
            "Filename": str(local_file),
            "Bucket": bucket,
            "Key": object_path,
            "ExtraArgs": {"Metadata": metadata},
        }
        if chunk_size:
            upload_kwargs["Config"] = TransferConfig(multipart_chunksize=chunk_size)

        log.info("Uploading to s3://%s/%s", bucket, object_path)
        try:
            await asyncio.to_thread(self._s3.upload_file, **upload_kwargs)
        except (ClientError, BotoCoreError, S3UploadFailedError, OSError) as e:
            raise RemoteBackendError(
                f"Failed to upload to s3://{bucket}/{object_path}: {e}",
                bucket=bucket,
                object_path=object_path,
            ) from e

    async def list_objects(self, bucket: str, prefix: str) -> list[str]:
        """List object keys under ``prefix``. Diagnostic only: errors yield []."""
        try:
            return await asyncio.to_thread(self._list_sync, bucket, prefix)
        except Exception as e:
            log.warning("Error listing files in prefix %s: %s", prefix, e)
            return []

    def _list_sync(self, bucket: str, prefix: str) -> list[str]:
        paginator = self._s3.get_paginator("list_objects_v2")
        names: list[str] = []
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                names.append(obj["Key"])
        return names
