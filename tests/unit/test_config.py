"""Tests for nested cachetier settings and env-var loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from cachetier.core.config import (
    DEFAULT_PATH_PREFIX,
    AppSettings,
    ArchiveConfig,
    LocalCacheConfig,
    RemoteConfig,
)


class TestRemoteConfig:
    def test_defaults_disable_remote(self) -> None:
        config = RemoteConfig()
        assert config.bucket == ""
        assert config.is_configured is False
        assert config.path_prefix == DEFAULT_PATH_PREFIX
        assert config.upload_chunk_size is None

    def test_whitespace_bucket_is_not_configured(self) -> None:
        assert RemoteConfig(bucket="   ").is_configured is False

    def test_bucket_enables_remote(self) -> None:
        assert RemoteConfig(bucket="builds").is_configured is True

    def test_blank_prefix_falls_back_to_default(self) -> None:
        assert RemoteConfig(path_prefix="").path_prefix == DEFAULT_PATH_PREFIX
        assert RemoteConfig(path_prefix="  ").path_prefix == DEFAULT_PATH_PREFIX

    def test_prefix_slashes_trimmed(self) -> None:
        assert RemoteConfig(path_prefix="/team/ci/").path_prefix == "team/ci"

    def test_zero_chunk_size_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RemoteConfig(upload_chunk_size=0)

    def test_reads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHETIER_REMOTE_BUCKET", "env-bucket")
        monkeypatch.setenv("CACHETIER_REMOTE_PATH_PREFIX", "nightly")
        monkeypatch.setenv("CACHETIER_REMOTE_UPLOAD_CHUNK_SIZE", "8388608")
        config = RemoteConfig()
        assert config.bucket == "env-bucket"
        assert config.path_prefix == "nightly"
        assert config.upload_chunk_size == 8388608


class TestArchiveAndLocalConfig:
    def test_archive_defaults(self) -> None:
        config = ArchiveConfig()
        assert config.compression == "auto"
        assert config.cross_os_archive is False
        assert config.working_directory == Path.cwd()

    def test_invalid_compression_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ArchiveConfig(compression="brotli")

    def test_local_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHETIER_LOCAL_BACKEND", "disabled")
        assert LocalCacheConfig().backend == "disabled"


class TestAppSettings:
    def test_aggregates_groups(self) -> None:
        settings = AppSettings(remote=RemoteConfig(bucket="b"))
        assert settings.remote.bucket == "b"
        assert settings.local.backend == "directory"
        assert settings.observability.log_level == "INFO"

    def test_sub_configs_read_env_at_construction(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHETIER_ARCHIVE_CROSS_OS_ARCHIVE", "true")
        assert AppSettings().archive.cross_os_archive is True
