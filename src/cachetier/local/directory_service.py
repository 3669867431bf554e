"""Directory-backed local cache service.

Layout under ``store_path``::

    index.json                       # CacheIndex (pydantic JSON)
    archives/<id>/cache.tzst|tgz     # one immutable archive per entry

Entries are scoped by a version hash of the requested paths, compression
method and cross-OS flag, so an archive is only restored by a caller that
asked for the same paths in the same format.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from cachetier.archive import (
    CompressionMethod,
    archive_size,
    archive_workspace,
    create_archive,
    extract_archive,
    format_size,
    get_cache_file_name,
    get_compression_method,
    resolve_paths,
)
from cachetier.core.types import RestoreOptions, SaveOptions
from cachetier.exceptions import (
    ArchiveError,
    LocalCacheError,
    PathValidationError,
    ReservedCacheError,
)
from cachetier.utils import check_key

log = logging.getLogger(__name__)


class LocalCacheEntry(BaseModel):
    """One saved archive."""

    id: int
    key: str
    version: str
    archive: str
    created_at: float = Field(default_factory=time.time)


class CacheIndex(BaseModel):
    """Persistent index of all entries in a store."""

    next_id: int = 1
    entries: list[LocalCacheEntry] = Field(default_factory=list)


def cache_version(paths: list[str], method: CompressionMethod, cross_os_archive: bool) -> str:
    """Hash of everything that makes two archives interchangeable."""
    components = [*paths, method.value]
    if cross_os_archive:
        components.append("enableCrossOsArchive")
    return hashlib.sha256("|".join(components).encode()).hexdigest()


class DirectoryCacheService:
    """Stores archives in a local directory, keyed by cache key and version.

    Restore looks up the primary key exactly, then each restore key as an
    exact match and, failing that, as a prefix (newest entry wins). Keys are
    immutable: saving an existing key and version is refused.
    """

    def __init__(
        self,
        store_path: Path,
        working_directory: Path,
        compression: str = "auto",
    ) -> None:
        self._store = Path(store_path)
        self._cwd = Path(working_directory)
        self._compression = compression
        self._lock = asyncio.Lock()

    @property
    def _index_path(self) -> Path:
        return self._store / "index.json"

    def _load_index(self) -> CacheIndex:
        if not self._index_path.is_file():
            return CacheIndex()
        try:
            return CacheIndex.model_validate_json(self._index_path.read_text(encoding="utf-8"))
        except PydanticValidationError as e:
            raise LocalCacheError(f"Corrupt cache index at {self._index_path}: {e}") from e

    def _write_index(self, index: CacheIndex) -> None:
        self._store.mkdir(parents=True, exist_ok=True)
        tmp = self._index_path.with_suffix(".json.tmp")
        tmp.write_text(index.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, self._index_path)

    def _find(self, keys: list[str], version: str) -> Optional[LocalCacheEntry]:
        entries = [e for e in self._load_index().entries if e.version == version]
        primary, *restore_keys = keys
        for entry in entries:
            if entry.key == primary:
                return entry
        for candidate in restore_keys:
            exact = [e for e in entries if e.key == candidate]
            if exact:
                return exact[0]
            prefixed = [e for e in entries if e.key.startswith(candidate)]
            if prefixed:
                return max(prefixed, key=lambda e: (e.created_at, e.id))
        return None

    async def restore(
        self,
        paths: list[str],
        primary_key: str,
        restore_keys: Optional[list[str]] = None,
        options: Optional[RestoreOptions] = None,
        cross_os_archive: bool = False,
    ) -> Optional[str]:
        options = options or RestoreOptions()
        keys = [primary_key, *(restore_keys or [])]
        for key in keys:
            check_key(key)

        try:
            method = get_compression_method(self._compression, cross_os_archive)
            version = cache_version(paths, method, cross_os_archive)
            entry = await asyncio.to_thread(self._find, keys, version)
            if entry is None:
                log.info("Cache not found in local store for keys: %s", ", ".join(keys))
                return None
            if options.lookup_only:
                log.info("Cache found in local store with key: %s", entry.key)
                return entry.key

            archive_path = self._store / entry.archive
            size = await asyncio.to_thread(archive_size, archive_path)
            log.info("Cache Size: %s", format_size(size))
            if size == 0:
                log.warning("Local archive for key %s is empty", entry.key)
                return None

            await asyncio.to_thread(extract_archive, archive_path, method, self._cwd)
            log.info("Cache restored from local store with key: %s", entry.key)
            return entry.key
        except (ArchiveError, LocalCacheError, OSError) as e:
            log.warning("Failed to restore from local store: %s", e)
            return None

    async def save(
        self,
        paths: list[str],
        key: str,
        options: Optional[SaveOptions] = None,
        cross_os_archive: bool = False,
    ) -> int:
        check_key(key)
        cache_paths = await asyncio.to_thread(resolve_paths, paths, self._cwd)
        if not cache_paths:
            raise PathValidationError(
                "Path Validation Error: Path(s) specified for caching do(es) not exist, "
                "hence no cache is being saved."
            )

        try:
            method = get_compression_method(self._compression, cross_os_archive)
            version = cache_version(paths, method, cross_os_archive)
            async with self._lock:
                return await self._save_locked(cache_paths, key, method, version)
        except ReservedCacheError as e:
            log.info("Failed to save: %s", e)
            return -1
        except (ArchiveError, LocalCacheError, OSError) as e:
            log.warning("Failed to save to local store: %s", e)
            return -1

    async def _save_locked(
        self,
        cache_paths: list[str],
        key: str,
        method: CompressionMethod,
        version: str,
    ) -> int:
        index = await asyncio.to_thread(self._load_index)
        if any(e.key == key and e.version == version for e in index.entries):
            raise ReservedCacheError(
                f"Unable to reserve cache with key {key}, another job may be creating this cache."
            )

        with archive_workspace() as folder:
            archive_path = await asyncio.to_thread(create_archive, folder, cache_paths, method, self._cwd)
            size = await asyncio.to_thread(archive_size, archive_path)
            log.info("Cache Size: %s", format_size(size))
            if size == 0:
                raise ArchiveError("Archive file is empty, nothing to save")

            entry_id = index.next_id
            relative = Path("archives") / str(entry_id) / get_cache_file_name(method)
            destination = self._store / relative
            destination.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(shutil.move, str(archive_path), str(destination))

        index.entries.append(
            LocalCacheEntry(id=entry_id, key=key, version=version, archive=relative.as_posix())
        )
        index.next_id = entry_id + 1
        await asyncio.to_thread(self._write_index, index)
        log.info("Cache saved to local store with key: %s (id %d)", key, entry_id)
        return entry_id

    def is_feature_available(self) -> bool:
        try:
            self._store.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            log.warning("Local cache store %s is not usable: %s", self._store, e)
            return False
        return os.access(self._store, os.W_OK)
