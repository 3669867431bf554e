"""CLI for cachetier: save / restore / available commands."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cachetier.coordinator import FallbackCoordinator
from cachetier.core.config import AppSettings, ArchiveConfig, LocalCacheConfig, RemoteConfig
from cachetier.core.startup_checks import validate_settings
from cachetier.core.types import RestoreOptions, SaveOptions
from cachetier.exceptions import ConfigurationError
from cachetier.logging_config import setup_logging
from cachetier.utils import get_input_as_array, get_input_as_int, is_exact_key_match

app = typer.Typer(name="cachetier", help="Two-tier artifact cache (S3 bucket + local fallback)")
console = Console()


def _build_settings(
    bucket: Optional[str],
    path_prefix: Optional[str],
    store_path: Optional[Path],
    cross_os_archive: bool,
    verbose: bool,
) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    settings = AppSettings()
    remote_overrides: dict = {}
    if bucket is not None:
        remote_overrides["bucket"] = bucket
    if path_prefix is not None:
        remote_overrides["path_prefix"] = path_prefix
    if remote_overrides:
        settings.remote = RemoteConfig(**{**settings.remote.model_dump(), **remote_overrides})
    if store_path is not None:
        settings.local = LocalCacheConfig(**{**settings.local.model_dump(), "store_path": store_path})
    if cross_os_archive:
        settings.archive = ArchiveConfig(**{**settings.archive.model_dump(), "cross_os_archive": True})
    if verbose:
        settings.observability.log_level = "DEBUG"
    return settings


def _prepare(settings: AppSettings) -> FallbackCoordinator:
    setup_logging(settings.observability)
    try:
        validate_settings(settings)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None
    return FallbackCoordinator(settings)


def _print_outputs(outputs: dict[str, str]) -> None:
    table = Table(show_header=True)
    table.add_column("output")
    table.add_column("value")
    for name, value in outputs.items():
        table.add_row(name, value)
    console.print(table)


@app.command()
def save(
    path: str = typer.Option(..., help="Newline-separated files, directories and globs to cache"),
    key: str = typer.Option(..., help="Explicit key for saving the cache"),
    upload_chunk_size: Optional[str] = typer.Option(None, help="Multipart chunk size in bytes"),
    bucket: Optional[str] = typer.Option(None, help="S3 bucket; overrides CACHETIER_REMOTE_BUCKET"),
    path_prefix: Optional[str] = typer.Option(None, help="Object prefix inside the bucket"),
    store_path: Optional[Path] = typer.Option(None, help="Local cache store directory"),
    cross_os_archive: bool = typer.Option(False, "--cross-os-archive", help="Portable gzip archive"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Save paths under a key."""
    settings = _build_settings(bucket, path_prefix, store_path, cross_os_archive, verbose)
    coordinator = _prepare(settings)
    chunk = get_input_as_int(upload_chunk_size or "") or None

    try:
        cache_id = asyncio.run(
            coordinator.save(get_input_as_array(path), key, SaveOptions(upload_chunk_size=chunk))
        )
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None

    if cache_id > 0:
        console.print(f"[green]Cache saved with key: {key}[/green]")
    else:
        console.print(f"[yellow]Cache was not saved for key: {key}[/yellow]")


@app.command()
def restore(
    path: str = typer.Option(..., help="Newline-separated files, directories and globs to restore"),
    key: str = typer.Option(..., help="Primary key for restoring the cache"),
    restore_keys: str = typer.Option("", help="Newline-separated ordered fallback key prefixes"),
    lookup_only: bool = typer.Option(False, "--lookup-only", help="Check for a match without downloading"),
    fail_on_cache_miss: bool = typer.Option(False, "--fail-on-cache-miss"),
    bucket: Optional[str] = typer.Option(None, help="S3 bucket; overrides CACHETIER_REMOTE_BUCKET"),
    path_prefix: Optional[str] = typer.Option(None, help="Object prefix inside the bucket"),
    store_path: Optional[Path] = typer.Option(None, help="Local cache store directory"),
    cross_os_archive: bool = typer.Option(False, "--cross-os-archive", help="Portable gzip archive"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Restore paths from the first matching key."""
    settings = _build_settings(bucket, path_prefix, store_path, cross_os_archive, verbose)
    coordinator = _prepare(settings)

    try:
        matched = asyncio.run(
            coordinator.restore(
                get_input_as_array(path),
                key,
                get_input_as_array(restore_keys),
                RestoreOptions(lookup_only=lookup_only),
            )
        )
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None

    _print_outputs(
        {
            "cache-hit": str(is_exact_key_match(key, matched)).lower(),
            "cache-primary-key": key,
            "cache-matched-key": matched or "",
        }
    )

    if matched is None:
        message = f"Cache not found for input keys: {', '.join([key, *get_input_as_array(restore_keys)])}"
        if fail_on_cache_miss:
            console.print(f"[red]Failed to restore cache entry. {message}[/red]")
            raise typer.Exit(code=1)
        console.print(message)
    else:
        console.print(f"[green]Cache restored from key: {matched}[/green]")


@app.command()
def available(
    bucket: Optional[str] = typer.Option(None, help="S3 bucket; overrides CACHETIER_REMOTE_BUCKET"),
    store_path: Optional[Path] = typer.Option(None, help="Local cache store directory"),
) -> None:
    """Report whether any cache tier is usable."""
    settings = _build_settings(bucket, None, store_path, False, False)
    setup_logging(settings.observability)
    coordinator = FallbackCoordinator(settings)
    if coordinator.is_feature_available():
        console.print("[green]Cache service is available[/green]")
    else:
        console.print("[red]Cache service is not available[/red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
