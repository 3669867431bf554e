"""Archive transfer between the local filesystem and the remote bucket.

Save: resolve paths → archive → size check → upload → existence check.
Restore: resolve key → download → size check → extract → path check.

This layer reports ``Found``/``NotFound``/``Failed``. It never decides to
fall back; transport exceptions propagate to the coordinator.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from cachetier.archive import (
    CompressionMethod,
    any_path_restored,
    archive_size,
    archive_workspace,
    create_archive,
    ensure_parent_directories,
    extract_archive,
    format_size,
    get_cache_file_name,
    list_archive,
    resolve_paths,
)
from cachetier.core.types import BackendResult, Failed, Found, NotFound, RestoreOptions, SaveOptions
from cachetier.exceptions import PathValidationError
from cachetier.remote.client import S3RemoteClient
from cachetier.remote.resolver import KeyResolver, remote_object_path

log = logging.getLogger(__name__)

CREATED_BY = "cachetier"


def build_metadata(key: str) -> dict[str, str]:
    """User metadata attached to every uploaded archive."""
    return {
        "cache-key": key,
        "created-by": CREATED_BY,
        "created-at": datetime.now(timezone.utc).isoformat(),
    }


class ArchiveTransfer:
    """Moves one archive per call between ``working_directory`` and a bucket."""

    def __init__(
        self,
        client: S3RemoteClient,
        bucket: str,
        path_prefix: str,
        method: CompressionMethod,
        working_directory: Path,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._prefix = path_prefix
        self._method = method
        self._cwd = working_directory

    async def save(self, paths: list[str], key: str, options: Optional[SaveOptions] = None) -> BackendResult:
        """Archive ``paths`` and upload them under ``key``.

        Raises:
            PathValidationError: No path resolved; raised before any network call.
        """
        options = options or SaveOptions()
        cache_paths = await asyncio.to_thread(resolve_paths, paths, self._cwd)
        log.debug("Cache Paths: %s", cache_paths)
        if not cache_paths:
            raise PathValidationError(
                "Path Validation Error: Path(s) specified for caching do(es) not exist, "
                "hence no cache is being saved."
            )

        log.info("Bucket: %s, path prefix: %s", self._bucket, self._prefix)
        if not await self._client.bucket_reachable(self._bucket):
            return Failed(f"bucket {self._bucket} is not reachable")

        with archive_workspace() as folder:
            log.info("Creating tar archive of cache files")
            archive_path = await asyncio.to_thread(
                create_archive, folder, cache_paths, self._method, self._cwd
            )
            await self._log_contents(archive_path)

            size = await asyncio.to_thread(archive_size, archive_path)
            log.info("Archive size: %d bytes", size)
            if size == 0:
                log.warning("Archive file is empty, no data to upload")
                return Failed("archive is empty")

            object_path = remote_object_path(self._prefix, key, self._method)
            await self._client.upload(
                self._bucket,
                archive_path,
                object_path,
                build_metadata(key),
                upload_chunk_size=options.upload_chunk_size,
            )

            log.info("Upload complete, verifying file exists in bucket")
            if await self._client.object_exists(self._bucket, object_path):
                log.info("Verified cache file exists at %s/%s", self._bucket, object_path)
                return Found(key=key, object_path=object_path)
            log.warning("Upload appeared to succeed but file not found in bucket")
            return Failed(f"{object_path} missing after upload")

    async def restore(
        self,
        paths: list[str],
        primary_key: str,
        restore_keys: Optional[list[str]] = None,
        options: Optional[RestoreOptions] = None,
    ) -> BackendResult:
        """Find the first matching archive and extract it into ``working_directory``."""
        options = options or RestoreOptions()
        keys = [primary_key, *(restore_keys or [])]

        log.info("Bucket: %s, path prefix: %s", self._bucket, self._prefix)
        if not await self._client.bucket_reachable(self._bucket):
            return Failed(f"bucket {self._bucket} is not reachable")

        await asyncio.to_thread(ensure_parent_directories, paths, self._cwd)

        with archive_workspace() as folder:
            archive_path = folder / get_cache_file_name(self._method)
            log.debug("Archive Path: %s", archive_path)

            resolver = KeyResolver(self._client, self._bucket, self._prefix, self._method)
            match = await resolver.resolve(keys)
            if not isinstance(match, Found):
                log.info("No matching cache found in bucket")
                return NotFound()

            if options.lookup_only:
                log.info("Cache found in bucket with key: %s", match.key)
                return match

            await self._client.download(self._bucket, match.object_path, archive_path)

            size = await asyncio.to_thread(archive_size, archive_path)
            log.info("Cache Size: %s", format_size(size))
            if size == 0:
                log.warning("Downloaded archive file is empty")
                return Failed("downloaded archive is empty")

            members = await asyncio.to_thread(list_archive, archive_path, self._method)
            for name in members:
                log.debug("  %s", name)
            log.info("Extracting archive to restore cache files")
            await asyncio.to_thread(extract_archive, archive_path, self._method, self._cwd)

            if not await asyncio.to_thread(any_path_restored, paths, self._cwd, members):
                log.warning("Extraction completed but cache files not found")
                return Failed("archive holds none of the requested paths")

            log.info("Cache restored successfully from bucket")
            return match

    async def _log_contents(self, archive_path: Path) -> None:
        if not log.isEnabledFor(logging.DEBUG):
            return
        for name in await asyncio.to_thread(list_archive, archive_path, self._method):
            log.debug("  %s", name)
