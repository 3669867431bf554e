"""Streaming tar archives with gzip or zstd compression.

Members are stored relative to the working directory so an archive created on
one machine extracts into the same layout under another checkout. Paths that
live outside the working directory (``~/.cache/...``) keep their ``..``
components, matching ``tar -P`` behaviour.
"""

from __future__ import annotations

import importlib.util
import logging
import os
import tarfile
from enum import Enum
from pathlib import Path

from cachetier.exceptions import ArchiveError

log = logging.getLogger(__name__)


class CompressionMethod(str, Enum):
    """Compression applied to the tar stream."""

    GZIP = "gzip"
    ZSTD = "zstd"


_CACHE_FILE_NAMES = {
    CompressionMethod.GZIP: "cache.tgz",
    CompressionMethod.ZSTD: "cache.tzst",
}

_TAR_SUFFIXES = {
    CompressionMethod.GZIP: "gz",
    CompressionMethod.ZSTD: "zst",
}


def zstd_supported() -> bool:
    """True when this interpreter's tarfile can read and write zstd streams."""
    if "zst" not in getattr(tarfile.TarFile, "OPEN_METH", {}):
        return False
    return importlib.util.find_spec("compression.zstd") is not None


def get_compression_method(preferred: str = "auto", cross_os_archive: bool = False) -> CompressionMethod:
    """Pick the compression method for this platform.

    ``auto`` prefers zstd, except for cross-OS archives which use gzip so any
    runner can read them.
    """
    if preferred == CompressionMethod.GZIP.value:
        return CompressionMethod.GZIP
    if preferred == CompressionMethod.ZSTD.value:
        if not zstd_supported():
            raise ArchiveError("zstd compression requested but not supported by this Python build")
        return CompressionMethod.ZSTD
    if preferred != "auto":
        raise ArchiveError(f"Unknown compression method: {preferred!r}")

    if cross_os_archive or not zstd_supported():
        return CompressionMethod.GZIP
    return CompressionMethod.ZSTD


def get_cache_file_name(method: CompressionMethod) -> str:
    """Archive file name for ``method`` (``cache.tgz`` / ``cache.tzst``)."""
    return _CACHE_FILE_NAMES[method]


def create_archive(
    archive_folder: Path,
    resolved_paths: list[str],
    method: CompressionMethod,
    working_directory: Path,
) -> Path:
    """Write ``resolved_paths`` into ``archive_folder/<cache file name>``.

    Args:
        archive_folder: Directory that receives the archive file.
        resolved_paths: Paths relative to ``working_directory``.
        method: Compression applied to the stream.
        working_directory: Base directory paths are resolved against.

    Returns:
        The archive path.
    """
    archive_path = archive_folder / get_cache_file_name(method)
    mode = f"w:{_TAR_SUFFIXES[method]}"
    try:
        with tarfile.open(archive_path, mode) as tar:
            for rel_path in resolved_paths:
                source = os.path.normpath(os.path.join(working_directory, rel_path))
                tar.add(source, arcname=os.path.normpath(rel_path), recursive=True)
    except (tarfile.TarError, OSError) as e:
        raise ArchiveError(f"Failed to create archive {archive_path}: {e}") from e
    log.debug("Created %s archive at %s (%d paths)", method.value, archive_path, len(resolved_paths))
    return archive_path


def list_archive(archive_path: Path, method: CompressionMethod) -> list[str]:
    """Return member names of an archive in stored order."""
    try:
        with tarfile.open(archive_path, f"r:{_TAR_SUFFIXES[method]}") as tar:
            return tar.getnames()
    except (tarfile.TarError, OSError) as e:
        raise ArchiveError(f"Failed to list archive {archive_path}: {e}") from e


def extract_archive(archive_path: Path, method: CompressionMethod, working_directory: Path) -> None:
    """Extract an archive produced by :func:`create_archive` under ``working_directory``."""
    try:
        with tarfile.open(archive_path, f"r:{_TAR_SUFFIXES[method]}") as tar:
            # members may point outside working_directory, see module docstring
            tar.extractall(path=working_directory, filter="fully_trusted")
    except (tarfile.TarError, OSError) as e:
        raise ArchiveError(f"Failed to extract archive {archive_path}: {e}") from e
    log.debug("Extracted %s into %s", archive_path, working_directory)
