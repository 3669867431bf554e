"""Tar archive primitives and filesystem path helpers."""

from __future__ import annotations

from cachetier.archive.codec import (
    CompressionMethod,
    create_archive,
    extract_archive,
    get_cache_file_name,
    get_compression_method,
    list_archive,
)
from cachetier.archive.paths import (
    any_path_restored,
    archive_size,
    archive_workspace,
    ensure_parent_directories,
    format_size,
    resolve_paths,
)

__all__ = [
    "CompressionMethod",
    "create_archive",
    "extract_archive",
    "list_archive",
    "get_cache_file_name",
    "get_compression_method",
    "any_path_restored",
    "archive_size",
    "archive_workspace",
    "ensure_parent_directories",
    "format_size",
    "resolve_paths",
]
