"""cachetier: two-tier artifact cache with an S3 bucket and a local fallback.

Typical use::

    from cachetier import AppSettings, FallbackCoordinator

    cache = FallbackCoordinator(AppSettings())
    cache_id = await cache.save(["node_modules"], "deps-abc123")
    matched = await cache.restore(["node_modules"], "deps-abc123", ["deps-"])
"""

from __future__ import annotations

from cachetier.coordinator import FallbackCoordinator
from cachetier.core.config import AppSettings
from cachetier.core.types import Failed, Found, NotFound, RestoreOptions, SaveOptions
from cachetier.exceptions import (
    ArchiveError,
    CacheTierError,
    ConfigurationError,
    KeyValidationError,
    LocalCacheError,
    PathValidationError,
    RemoteBackendError,
    ReservedCacheError,
)
from cachetier.utils import is_exact_key_match

__all__ = [
    "AppSettings",
    "FallbackCoordinator",
    "RestoreOptions",
    "SaveOptions",
    "Found",
    "NotFound",
    "Failed",
    "is_exact_key_match",
    "CacheTierError",
    "ConfigurationError",
    "PathValidationError",
    "KeyValidationError",
    "RemoteBackendError",
    "ArchiveError",
    "LocalCacheError",
    "ReservedCacheError",
]
