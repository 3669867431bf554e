"""Exception hierarchy for cachetier."""


class CacheTierError(Exception):
    """Base exception for all cachetier errors."""


class ConfigurationError(CacheTierError):
    """The caller asked for something no tier can satisfy.

    Configuration errors are never downgraded into a tier fallback.
    """


class PathValidationError(ConfigurationError):
    """None of the requested paths resolved to an existing file."""


class KeyValidationError(ConfigurationError):
    """A cache key is too long or contains a comma."""


class RemoteBackendError(CacheTierError):
    """Raised when an object-store call fails."""

    def __init__(self, message: str, bucket: str = "", object_path: str = "") -> None:
        super().__init__(message)
        self.bucket = bucket
        self.object_path = object_path


class ArchiveError(CacheTierError):
    """Raised when creating, listing or extracting an archive fails."""


class LocalCacheError(CacheTierError):
    """Raised when the local cache service cannot complete an operation."""


class ReservedCacheError(LocalCacheError):
    """A local cache entry already exists for the key; entries are immutable."""
