"""Two-state fallback coordinator: try the remote bucket, then the local service.

Per call::

    TryRemote ──(Found / positive id)──────────────▶ return
        │
        └──(NotFound, Failed, any exception)──▶ UseLocal ──▶ return as-is

``TryRemote`` is only entered when a bucket is configured. A failed remote
attempt is never retried within the call, and nothing carries over to the
next call.
"""

from __future__ import annotations

import logging
from typing import Optional

from cachetier.archive import get_compression_method
from cachetier.core.config import AppSettings
from cachetier.core.types import Failed, Found, NotFound, RestoreOptions, SaveOptions
from cachetier.exceptions import ConfigurationError
from cachetier.local import ILocalCacheService, create_local_cache_service
from cachetier.remote.client import S3RemoteClient
from cachetier.transfer import ArchiveTransfer
from cachetier.utils import check_key

log = logging.getLogger(__name__)

# Result id reported for a successful remote save
REMOTE_CACHE_ID = 1


class FallbackCoordinator:
    """Save/restore entry points over the remote and local tiers.

    Args:
        settings: Backend selection is derived from these alone.
        local: Local tier; built from ``settings.local`` when omitted.
        remote_client: S3 client; built lazily from ``settings.remote`` on the
            first remote attempt when omitted.
    """

    def __init__(
        self,
        settings: AppSettings,
        local: Optional[ILocalCacheService] = None,
        remote_client: Optional[S3RemoteClient] = None,
    ) -> None:
        self._settings = settings
        self._local = local if local is not None else create_local_cache_service(settings)
        self._remote_client = remote_client

    @property
    def remote_configured(self) -> bool:
        return self._settings.remote.is_configured

    def _transfer(self) -> ArchiveTransfer:
        remote = self._settings.remote
        archive = self._settings.archive
        if self._remote_client is None:
            self._remote_client = S3RemoteClient(
                region=remote.region,
                endpoint_url=remote.endpoint_url,
                upload_chunk_size=remote.upload_chunk_size,
            )
        return ArchiveTransfer(
            client=self._remote_client,
            bucket=remote.bucket,
            path_prefix=remote.path_prefix,
            method=get_compression_method(archive.compression, archive.cross_os_archive),
            working_directory=archive.working_directory,
        )

    async def restore(
        self,
        paths: list[str],
        primary_key: str,
        restore_keys: Optional[list[str]] = None,
        options: Optional[RestoreOptions] = None,
    ) -> Optional[str]:
        """Restore ``paths`` from the first tier holding a matching key.

        Returns:
            The matched key, or None when no tier had a match.
        """
        restore_keys = list(restore_keys or [])
        for key in (primary_key, *restore_keys):
            check_key(key)

        if self.remote_configured:
            try:
                result = await self._transfer().restore(paths, primary_key, restore_keys, options)
            except ConfigurationError:
                raise
            except Exception as e:
                log.warning("Failed to restore from remote bucket: %s", e)
                log.info("Falling back to local cache")
            else:
                if isinstance(result, Found):
                    log.info("Cache restored from remote bucket with key: %s", result.key)
                    return result.key
                if isinstance(result, NotFound):
                    log.info("Cache not found in remote bucket, falling back to local cache")
                elif isinstance(result, Failed):
                    log.warning("Remote restore failed (%s), falling back to local cache", result.reason)

        return await self._local.restore(
            paths,
            primary_key,
            restore_keys,
            options,
            self._settings.archive.cross_os_archive,
        )

    async def save(
        self,
        paths: list[str],
        key: str,
        options: Optional[SaveOptions] = None,
    ) -> int:
        """Save ``paths`` under ``key`` to the first tier that accepts it.

        Returns:
            A positive id on success, -1 when the final tier failed too.

        Raises:
            ConfigurationError: Invalid key or no path resolved. Never masked
                by fallback.
        """
        check_key(key)
        options = options or SaveOptions()

        if self.remote_configured:
            try:
                result = await self._transfer().save(paths, key, options)
            except ConfigurationError:
                raise
            except Exception as e:
                log.warning("Failed to save to remote bucket: %s", e)
                log.info("Falling back to local cache")
            else:
                if isinstance(result, Found):
                    log.info("Cache saved to remote bucket with key: %s", key)
                    return REMOTE_CACHE_ID
                reason = result.reason if isinstance(result, Failed) else "not stored"
                log.warning("Failed to save to remote bucket (%s), falling back to local cache", reason)

        return await self._local.save(
            paths,
            key,
            options,
            self._settings.archive.cross_os_archive,
        )

    def is_feature_available(self) -> bool:
        """True when a bucket is configured or the local service is usable."""
        if self.remote_configured:
            log.info("Remote bucket configured: %s", self._settings.remote.bucket)
            return True
        return self._local.is_feature_available()
