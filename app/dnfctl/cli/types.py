"""Shared helpers for CLI commands.

Builds the settings, query adapter, worker pool and progress trackers
every command needs, and turns common failures into a clean exit.
"""

from datetime import datetime
from typing import NoReturn

import typer

from dnfctl.core.pool import ChunkedWorkerPool
from dnfctl.core.progress import ProgressTracker
from dnfctl.core.settings import Settings, SettingsError, load_settings
from dnfctl.core.store import PackageStore, PreconditionMissingError
from dnfctl.query.base import QueryAdapter
from dnfctl.query.dnf import DnfQueryAdapter
from dnfctl.utils.formatting import print_error, print_info

# Matches the timestamp used in backup and archive names
STAMP_FORMAT = "%Y%m%d-%H%M%S"


def make_stamp(now: datetime | None = None) -> str:
    """Return a timestamp suitable for backup and archive names."""
    return (now or datetime.now()).strftime(STAMP_FORMAT)


def is_quiet(ctx: typer.Context) -> bool:
    """Check whether --quiet was given on the main command."""
    return bool((ctx.obj or {}).get("quiet", False))


def get_settings() -> Settings:
    """Load settings or exit with an error."""
    try:
        return load_settings()
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def get_store(settings: Settings) -> PackageStore:
    """Return the package store, creating the data directories."""
    paths = settings.paths
    try:
        paths.ensure_dirs()
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    return PackageStore(paths)


def get_adapter(settings: Settings) -> QueryAdapter:
    """Return an available query adapter or exit with an error."""
    adapter = DnfQueryAdapter(timeout=settings.effective_timeout)
    if not adapter.is_available():
        print_error("dnf and rpm are required but were not found on this system.")
        raise typer.Exit(code=1)
    return adapter


def get_pool(settings: Settings) -> ChunkedWorkerPool:
    """Return a worker pool sized from settings."""
    return ChunkedWorkerPool(
        chunk_size=settings.chunk_size,
        max_concurrency=settings.max_parallel_jobs,
    )


def make_progress(
    settings: Settings,
    total: int,
    operation: str,
    quiet: bool = False,
) -> ProgressTracker:
    """Create a progress tracker honouring ENABLE_PROGRESS and --quiet."""
    return ProgressTracker(
        total,
        operation,
        enabled=settings.enable_progress and not quiet,
    )


def exit_precondition(error: PreconditionMissingError) -> NoReturn:
    """Report a missing prerequisite with its hint and exit 1."""
    print_error(str(error))
    print_info(error.hint)
    raise typer.Exit(code=1) from error
