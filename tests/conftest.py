"""Shared fixtures for cachetier tests."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterator

import pytest
import structlog

from cachetier.core.config import (
    AppSettings,
    ArchiveConfig,
    LocalCacheConfig,
    ObservabilityConfig,
    RemoteConfig,
)
from tests.fakes.fake_s3 import FakeS3Client

BUCKET = "cache-bucket"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer/CI CACHETIER_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith("CACHETIER_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo ``setup_logging`` calls (the CLI installs a root handler)."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
    for name in ("cachetier", "botocore", "boto3", "s3transfer", "urllib3"):
        logging.getLogger(name).setLevel(logging.NOTSET)
    structlog.reset_defaults()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Working directory with a small cache tree under ``deps/``."""
    root = tmp_path / "work"
    (root / "deps" / "nested").mkdir(parents=True)
    (root / "deps" / "a.txt").write_text("alpha\n", encoding="utf-8")
    (root / "deps" / "nested" / "b.bin").write_bytes(bytes(range(256)) * 4)
    (root / "deps" / ".hidden").write_text("dot\n", encoding="utf-8")
    return root


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client(buckets=(BUCKET,))


@pytest.fixture
def make_settings(tmp_path: Path, workspace: Path) -> Callable[..., AppSettings]:
    """Build explicit settings (gzip archives, local store under tmp_path)."""

    def _make(bucket: str = BUCKET, path_prefix: str = "ci", local_backend: str = "directory") -> AppSettings:
        return AppSettings(
            remote=RemoteConfig(bucket=bucket, path_prefix=path_prefix),
            archive=ArchiveConfig(compression="gzip", working_directory=workspace),
            local=LocalCacheConfig(backend=local_backend, store_path=tmp_path / "store"),
            observability=ObservabilityConfig(log_level="DEBUG"),
        )

    return _make
