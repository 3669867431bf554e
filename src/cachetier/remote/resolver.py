"""First-match key resolution against the remote bucket."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cachetier.archive.codec import CompressionMethod, get_cache_file_name
from cachetier.core.types import BackendResult, Found, NotFound

if TYPE_CHECKING:
    from cachetier.remote.client import S3RemoteClient

log = logging.getLogger(__name__)


def remote_object_path(path_prefix: str, key: str, method: CompressionMethod) -> str:
    """``<prefix>/<key>.<cache file name>``: the only remote addressing scheme."""
    return f"{path_prefix}/{key}.{get_cache_file_name(method)}"


class KeyResolver:
    """Walks candidate keys in caller order and returns the first that exists.

    There is no scoring and no recency comparison: list order is the
    tie-break.
    """

    def __init__(
        self,
        client: S3RemoteClient,
        bucket: str,
        path_prefix: str,
        method: CompressionMethod,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._prefix = path_prefix
        self._method = method

    async def resolve(self, keys: list[str]) -> BackendResult:
        """Return ``Found`` for the first existing candidate, else ``NotFound``."""
        log.info("Looking for cache with keys: %s", ", ".join(keys))
        for key in keys:
            object_path = remote_object_path(self._prefix, key, self._method)
            log.debug("Checking if cache exists at: %s/%s", self._bucket, object_path)
            try:
                exists = await self._client.object_exists(self._bucket, object_path)
            except Exception as e:
                log.warning("Error checking if file exists at %s/%s: %s", self._bucket, object_path, e)
                continue
            if exists:
                log.info("Found cache file in bucket %s with path %s", self._bucket, object_path)
                return Found(key=key, object_path=object_path)
            log.debug("No cache file found at: %s/%s", self._bucket, object_path)

        await self._log_available_objects()
        return NotFound()

    async def _log_available_objects(self) -> None:
        names = await self._client.list_objects(self._bucket, f"{self._prefix}/")
        if not names:
            log.info("No files found in prefix: %s", self._prefix)
            return
        log.info("Found %d files in %s:", len(names), self._prefix)
        for name in names:
            log.info("- %s", name)
