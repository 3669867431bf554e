"""Tagged tier outcomes and per-call options."""

from __future__ import annotations

import dataclasses
from typing import Optional, Union


@dataclasses.dataclass(frozen=True)
class Found:
    """A tier holds (or just stored) an archive for ``key`` at ``object_path``."""

    key: str
    object_path: str


@dataclasses.dataclass(frozen=True)
class NotFound:
    """No candidate key matched. Not an error."""


@dataclasses.dataclass(frozen=True)
class Failed:
    """The attempt ran but produced no usable result."""

    reason: str


BackendResult = Union[Found, NotFound, Failed]


@dataclasses.dataclass(frozen=True)
class RestoreOptions:
    """Per-call restore options.

    ``lookup_only`` reports a match without downloading anything.
    """

    lookup_only: bool = False


@dataclasses.dataclass(frozen=True)
class SaveOptions:
    """Per-call save options.

    ``upload_chunk_size`` overrides the configured multipart chunk size.
    """

    upload_chunk_size: Optional[int] = None
