"""Filesystem helpers: pattern resolution, scoped archive workspaces."""

from __future__ import annotations

import contextlib
import glob
import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

log = logging.getLogger(__name__)


def _expand(pattern: str, working_directory: Path) -> list[str]:
    """Glob one pattern, returning matches relative to ``working_directory``."""
    expanded = os.path.expanduser(pattern)
    if not os.path.isabs(expanded):
        expanded = os.path.join(working_directory, expanded)
    matches = glob.glob(expanded, recursive=True, include_hidden=True)
    return [os.path.relpath(m, working_directory) for m in matches]


def _include_patterns(patterns: list[str]) -> Iterator[str]:
    for raw in patterns:
        pattern = raw.strip()
        if pattern and not pattern.startswith("!"):
            yield pattern


def _is_under(path: str, directory: str) -> bool:
    if directory == os.curdir:
        return path != os.curdir and not path.startswith(os.pardir)
    return path.startswith(directory + os.sep)


def _ancestors(path: str) -> Iterator[str]:
    parent = os.path.dirname(path)
    while parent and parent != path:
        yield parent
        path, parent = parent, os.path.dirname(parent)


def _apply_exclusions(included: set[str], excluded: set[str], working_directory: Path) -> set[str]:
    """Drop excluded paths, opening up any directory that holds an excluded entry."""
    kept: set[str] = set()
    pending = list(included)
    while pending:
        path = pending.pop()
        if path in excluded or any(_is_under(path, e) for e in excluded):
            continue
        full = os.path.join(working_directory, path)
        if os.path.isdir(full) and not os.path.islink(full) and any(_is_under(e, path) for e in excluded):
            pending.extend(os.path.normpath(os.path.join(path, child)) for child in os.listdir(full))
            continue
        kept.add(path)
    return kept


def _drop_nested(paths: set[str]) -> list[str]:
    """Keep only top-most entries; a directory is archived with its contents."""
    if os.curdir in paths:
        return sorted(p for p in paths if p == os.curdir or p.startswith(os.pardir))
    return sorted(p for p in paths if not any(a in paths for a in _ancestors(p)))


def resolve_paths(patterns: list[str], working_directory: Path) -> list[str]:
    """Resolve path patterns to existing paths relative to ``working_directory``.

    Patterns support ``*``, ``**`` and ``~``. A pattern starting with ``!``
    removes its matches (and everything below them) from the result. Blank
    entries are ignored. Entries already covered by a resolved directory are
    dropped so each file is archived once.
    """
    included: set[str] = set()
    excluded: set[str] = set()
    for raw in patterns:
        pattern = raw.strip()
        if not pattern:
            continue
        if pattern.startswith("!"):
            excluded.update(_expand(pattern[1:].strip(), working_directory))
        else:
            included.update(_expand(pattern, working_directory))
    return _drop_nested(_apply_exclusions(included, excluded, working_directory))


def any_path_restored(patterns: list[str], working_directory: Path, members: list[str]) -> bool:
    """True when a requested pattern matches something the archive itself wrote.

    Matches that only exist because of ``ensure_parent_directories`` or an
    earlier checkout do not count.
    """
    written: set[str] = set()
    for member in members:
        name = os.path.normpath(member)
        written.add(name)
        written.update(_ancestors(name))

    for pattern in _include_patterns(patterns):
        if any(match in written for match in _expand(pattern, working_directory)):
            log.info("Verified cache path exists after extraction: %s", pattern)
            return True
    return False


def ensure_parent_directories(patterns: list[str], working_directory: Path) -> None:
    """Create the parent directory of every requested path. Failures are logged only."""
    for pattern in _include_patterns(patterns):
        target = Path(os.path.expanduser(pattern))
        if not target.is_absolute():
            target = working_directory / target
        parent = target.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            log.debug("Ensured directory: %s", parent)
        except OSError as e:
            log.warning("Failed to create directory %s: %s", parent, e)


def archive_size(archive_path: Path) -> int:
    """Archive size in bytes."""
    return archive_path.stat().st_size


def format_size(size: int) -> str:
    """Human-readable ``~N MB (N B)`` string."""
    return f"~{round(size / (1024 * 1024))} MB ({size} B)"


@contextlib.contextmanager
def archive_workspace() -> Iterator[Path]:
    """Temporary directory owned by one save/restore call, removed on every exit path."""
    folder = Path(tempfile.mkdtemp(prefix="cachetier-"))
    try:
        yield folder
    finally:
        try:
            shutil.rmtree(folder)
        except OSError as e:
            log.debug("Failed to delete archive workspace %s: %s", folder, e)
