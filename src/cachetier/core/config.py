"""Nested pydantic-settings configuration for cachetier.

Each group reads its own ``CACHETIER_<GROUP>_*`` env vars::

    export CACHETIER_REMOTE_BUCKET=my-build-cache
    export CACHETIER_REMOTE_PATH_PREFIX=ci
    export CACHETIER_ARCHIVE_COMPRESSION=gzip

Backend selection is a pure function of an ``AppSettings`` instance; nothing
downstream reads the environment directly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_PATH_PREFIX = "artifact-cache"


class RemoteConfig(BaseSettings):
    """Remote object-store tier.

    Env vars use ``CACHETIER_REMOTE_`` prefix. A blank ``bucket`` disables the
    remote tier entirely.
    """

    model_config = {"env_prefix": "CACHETIER_REMOTE_"}

    bucket: str = ""
    path_prefix: str = DEFAULT_PATH_PREFIX
    region: str = "us-east-1"
    endpoint_url: str = ""
    upload_chunk_size: Optional[int] = Field(default=None, gt=0)

    @field_validator("bucket", mode="before")
    @classmethod
    def _strip_bucket(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("path_prefix", mode="before")
    @classmethod
    def _default_blank_prefix(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_PATH_PREFIX
        return value.strip().strip("/") if isinstance(value, str) else value

    @property
    def is_configured(self) -> bool:
        """True when a bucket identifier is set (reachability not verified)."""
        return bool(self.bucket)


class ArchiveConfig(BaseSettings):
    """Archive creation options.

    Env vars use ``CACHETIER_ARCHIVE_`` prefix.
    """

    model_config = {"env_prefix": "CACHETIER_ARCHIVE_"}

    compression: Literal["auto", "gzip", "zstd"] = "auto"
    cross_os_archive: bool = False
    working_directory: Path = Field(default_factory=Path.cwd)


class LocalCacheConfig(BaseSettings):
    """Local cache service tier.

    Env vars use ``CACHETIER_LOCAL_`` prefix.
    """

    model_config = {"env_prefix": "CACHETIER_LOCAL_"}

    backend: Literal["directory", "disabled"] = "directory"
    store_path: Path = Path("./.cachetier")


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Env vars use ``CACHETIER_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "CACHETIER_OBSERVABILITY_"}

    log_level: str = "INFO"


class AppSettings(BaseSettings):
    """Top-level settings aggregating all sub-configs."""

    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    local: LocalCacheConfig = Field(default_factory=LocalCacheConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
