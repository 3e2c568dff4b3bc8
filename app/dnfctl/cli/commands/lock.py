"""Lock command implementation.

Enriches the manual and auto package lists with exact versions and
writes the lock file.
"""

from typing import Annotated

import typer

from dnfctl.cli.types import (
    exit_precondition,
    get_adapter,
    get_pool,
    get_settings,
    get_store,
    is_quiet,
    make_progress,
)
from dnfctl.core.enrich import EnrichmentResult, enrich_packages
from dnfctl.core.lockfile import LockfileError, build_lock, save_lock
from dnfctl.core.pool import ChunkedWorkerPool
from dnfctl.core.settings import Settings
from dnfctl.core.store import PackageListMissingError, PackageStore, PreconditionMissingError
from dnfctl.core.system import collect_system_metadata
from dnfctl.models.lockfile import LockArtifact
from dnfctl.query.base import QueryAdapter
from dnfctl.utils.formatting import (
    console,
    create_record_table,
    format_record_row,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Create a lock file with exact package versions.",
    invoke_without_command=True,
)


def create_lock(
    settings: Settings,
    adapter: QueryAdapter,
    pool: ChunkedWorkerPool,
    store: PackageStore,
    quiet: bool = False,
) -> tuple[LockArtifact, EnrichmentResult, EnrichmentResult]:
    """Build and save the lock file from the stored name lists.

    Args:
        settings: Runtime settings.
        adapter: Query adapter to use.
        pool: Worker pool for enrichment.
        store: Package store with the manual and auto lists.
        quiet: Suppress progress output.

    Returns:
        Tuple of (artifact, manual enrichment, auto enrichment).

    Raises:
        PackageListMissingError: If analyze has not been run.
        LockfileError: If the lock file cannot be written.
    """
    manual_names = store.load_manual()
    auto_names = store.load_auto()

    with make_progress(settings, len(manual_names), "Gathering manual packages", quiet) as progress:
        manual = enrich_packages(manual_names, adapter, pool, progress)
    with make_progress(settings, len(auto_names), "Gathering dependencies", quiet) as progress:
        auto = enrich_packages(auto_names, adapter, pool, progress)

    artifact = build_lock(
        manual.records,
        auto.records,
        adapter.list_repositories(),
        manual_names=manual_names,
        auto_names=auto_names,
        system=collect_system_metadata(settings.max_parallel_jobs),
    )
    save_lock(artifact, store.paths.lock)
    return artifact, manual, auto


def report_enrichment(manual: EnrichmentResult, auto: EnrichmentResult) -> None:
    """Warn about packages that were skipped or lack a repository."""
    skipped = len(manual.skipped) + len(auto.skipped)
    if skipped:
        print_warning(f"{skipped} package(s) were no longer installed and were skipped.")
    degraded = len(manual.degraded) + len(auto.degraded)
    if degraded:
        print_warning(f"{degraded} package(s) have no known repository.")


@app.callback(invoke_without_command=True)
def lock_packages(
    ctx: typer.Context,
    show: Annotated[
        bool,
        typer.Option(
            "--show",
            "-s",
            help="Print the locked manual packages as a table.",
        ),
    ] = False,
) -> None:
    """Create a lock file from the analyzed package lists.

    Queries the exact version, architecture, size, install time and
    repository of every manual package and auto dependency in parallel.

    Examples:
        dnfctl lock                    # Write outputs/fedora.lock
        dnfctl lock --show             # Also print the manual packages
    """
    if ctx.invoked_subcommand is not None:
        return

    quiet = is_quiet(ctx)
    settings = get_settings()
    store = get_store(settings)
    if not store.has_lists():
        exit_precondition(PackageListMissingError())

    adapter = get_adapter(settings)
    pool = get_pool(settings)
    if not quiet:
        print_info(f"Creating lock file using {settings.max_parallel_jobs} parallel jobs...")

    try:
        artifact, manual, auto = create_lock(settings, adapter, pool, store, quiet)
    except PreconditionMissingError as e:
        exit_precondition(e)
    except LockfileError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    report_enrichment(manual, auto)

    if show:
        table = create_record_table("Locked Manual Packages")
        for record in artifact.manual:
            table.add_row(*format_record_row(record))
        console.print(table)

    print_success(f"Lock file created: {store.paths.lock}")
    console.print(f"  Manual packages locked: [package_manual]{len(artifact.manual)}[/]")
    console.print(f"  Dependencies locked:    [package_auto]{len(artifact.auto)}[/]")
