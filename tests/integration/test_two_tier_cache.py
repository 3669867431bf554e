"""End-to-end tests: coordinator + real local store + fake bucket."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable

from cachetier.coordinator import FallbackCoordinator
from cachetier.core.config import AppSettings
from cachetier.local import DirectoryCacheService
from cachetier.remote.client import S3RemoteClient
from tests.fakes.fake_s3 import FakeS3Client
from tests.helpers import snapshot

SettingsFactory = Callable[..., AppSettings]


def _coordinator(settings: AppSettings, fake_s3: FakeS3Client) -> FallbackCoordinator:
    return FallbackCoordinator(settings, remote_client=S3RemoteClient(boto3_client=fake_s3))


def _local_entries(tmp_path: Path) -> int:
    index = tmp_path / "store" / "index.json"
    if not index.is_file():
        return 0
    return index.read_text(encoding="utf-8").count('"key"')


async def test_remote_round_trip(
    make_settings: SettingsFactory, fake_s3: FakeS3Client, workspace: Path, tmp_path: Path
) -> None:
    before = snapshot(workspace / "deps")
    coordinator = _coordinator(make_settings(), fake_s3)

    assert await coordinator.save(["deps"], "deps-1") > 0
    assert "ci/deps-1.cache.tgz" in fake_s3.buckets["cache-bucket"]
    assert _local_entries(tmp_path) == 0

    shutil.rmtree(workspace / "deps")
    assert await coordinator.restore(["deps"], "deps-1") == "deps-1"
    assert snapshot(workspace / "deps") == before


async def test_nonexistent_bucket_falls_back_end_to_end(
    make_settings: SettingsFactory, fake_s3: FakeS3Client, workspace: Path, tmp_path: Path
) -> None:
    before = snapshot(workspace / "deps")
    coordinator = _coordinator(make_settings(bucket="bucket-that-does-not-exist"), fake_s3)

    assert await coordinator.save(["deps"], "deps-1") > 0
    assert _local_entries(tmp_path) == 1

    shutil.rmtree(workspace / "deps")
    assert await coordinator.restore(["deps"], "deps-1") == "deps-1"
    assert snapshot(workspace / "deps") == before


async def test_no_bucket_matches_local_only_service(
    make_settings: SettingsFactory, fake_s3: FakeS3Client, workspace: Path, tmp_path: Path
) -> None:
    settings = make_settings(bucket="")
    coordinator = _coordinator(settings, fake_s3)
    local_only = DirectoryCacheService(
        store_path=tmp_path / "store",
        working_directory=workspace,
        compression="gzip",
    )

    assert await coordinator.save(["deps"], "deps-1") == 1
    assert await local_only.restore(["deps"], "deps-1") == "deps-1"
    assert await coordinator.restore(["deps"], "deps-2", ["deps-"]) == "deps-1"
    assert fake_s3.calls == []


async def test_remote_miss_uses_local_entry(
    make_settings: SettingsFactory, fake_s3: FakeS3Client, workspace: Path
) -> None:
    # saved while the bucket was missing, restored once the bucket exists but is empty
    await _coordinator(make_settings(bucket="later-bucket"), fake_s3).save(["deps"], "deps-1")
    fake_s3.buckets["later-bucket"] = {}
    shutil.rmtree(workspace / "deps")

    coordinator = _coordinator(make_settings(bucket="later-bucket"), fake_s3)
    assert await coordinator.restore(["deps"], "deps-1") == "deps-1"
    assert (workspace / "deps" / "a.txt").read_text(encoding="utf-8") == "alpha\n"


async def test_repeated_restore_is_read_only(
    make_settings: SettingsFactory, fake_s3: FakeS3Client, workspace: Path
) -> None:
    coordinator = _coordinator(make_settings(), fake_s3)
    await coordinator.save(["deps"], "deps-1")
    writes = fake_s3.writes

    results = [await coordinator.restore(["deps"], "deps-2", ["deps-1"]) for _ in range(3)]

    assert results == ["deps-1", "deps-1", "deps-1"]
    assert fake_s3.writes == writes
