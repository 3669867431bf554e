"""Local cache service tier: protocol, directory implementation, factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cachetier.local.directory_service import DirectoryCacheService
from cachetier.local.disabled_service import DisabledCacheService
from cachetier.local.protocols import ILocalCacheService

if TYPE_CHECKING:
    from cachetier.core.config import AppSettings

__all__ = [
    "ILocalCacheService",
    "DirectoryCacheService",
    "DisabledCacheService",
    "create_local_cache_service",
]


def create_local_cache_service(settings: AppSettings) -> ILocalCacheService:
    """Create the local tier from settings."""
    backend = settings.local.backend
    if backend == "directory":
        return DirectoryCacheService(
            store_path=settings.local.store_path,
            working_directory=settings.archive.working_directory,
            compression=settings.archive.compression,
        )
    elif backend == "disabled":
        return DisabledCacheService(working_directory=settings.archive.working_directory)
    else:
        raise ValueError(f"Unknown local cache backend: {backend!r}")
