"""Local cache service protocol: the contract the fallback tier implements."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from cachetier.core.types import RestoreOptions, SaveOptions


@runtime_checkable
class ILocalCacheService(Protocol):
    """Opaque save/restore service consumed as the final tier."""

    async def restore(
        self,
        paths: list[str],
        primary_key: str,
        restore_keys: Optional[list[str]] = None,
        options: Optional[RestoreOptions] = None,
        cross_os_archive: bool = False,
    ) -> Optional[str]:
        """Restore the first matching entry. Returns the matched key or None."""
        ...

    async def save(
        self,
        paths: list[str],
        key: str,
        options: Optional[SaveOptions] = None,
        cross_os_archive: bool = False,
    ) -> int:
        """Save ``paths`` under ``key``. Returns a positive id, or -1 on failure."""
        ...

    def is_feature_available(self) -> bool:
        """Whether the service can currently be used."""
        ...
