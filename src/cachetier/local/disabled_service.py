"""Null local tier used when ``CACHETIER_LOCAL_BACKEND=disabled``."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from cachetier.archive import resolve_paths
from cachetier.core.types import RestoreOptions, SaveOptions
from cachetier.exceptions import PathValidationError
from cachetier.utils import check_key

log = logging.getLogger(__name__)


class DisabledCacheService:
    """Reports itself unavailable; every call is a miss or a failed save.

    Caller mistakes (bad keys, paths that resolve to nothing) still raise,
    the same as with a working store.
    """

    def __init__(self, working_directory: Optional[Path] = None) -> None:
        self._cwd = Path(working_directory) if working_directory is not None else Path.cwd()

    async def restore(
        self,
        paths: list[str],
        primary_key: str,
        restore_keys: Optional[list[str]] = None,
        options: Optional[RestoreOptions] = None,
        cross_os_archive: bool = False,
    ) -> Optional[str]:
        for key in (primary_key, *(restore_keys or [])):
            check_key(key)
        log.warning("Local cache is disabled, nothing to restore for key %s", primary_key)
        return None

    async def save(
        self,
        paths: list[str],
        key: str,
        options: Optional[SaveOptions] = None,
        cross_os_archive: bool = False,
    ) -> int:
        check_key(key)
        if not await asyncio.to_thread(resolve_paths, paths, self._cwd):
            raise PathValidationError(
                "Path Validation Error: Path(s) specified for caching do(es) not exist, "
                "hence no cache is being saved."
            )
        log.warning("Local cache is disabled, key %s was not saved", key)
        return -1

    def is_feature_available(self) -> bool:
        return False
