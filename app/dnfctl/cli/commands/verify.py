"""Verify command implementation.

Checks the installed system against the lock file.
"""

import json
from typing import Annotated

import typer

from dnfctl.cli.types import (
    get_adapter,
    get_pool,
    get_settings,
    get_store,
    is_quiet,
    make_progress,
)
from dnfctl.core.lockfile import (
    LockfileError,
    LockfileNotFoundError,
    checksum_names,
    load_lock,
)
from dnfctl.core.store import PackageStore
from dnfctl.core.verify import VerificationReport, preview, verify_lock
from dnfctl.models.lockfile import Checksums
from dnfctl.query.base import QueryError
from dnfctl.utils.formatting import (
    console,
    print_error,
    print_info,
    print_list,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Verify the system against the lock file.",
    invoke_without_command=True,
)


def _stored_checksums(store: PackageStore) -> Checksums | None:
    """Checksums of the current name lists, None when they don't exist."""
    if not store.has_lists():
        return None
    return Checksums(
        manual=checksum_names(store.load_manual()),
        auto=checksum_names(store.load_auto()),
    )


def _print_report(report: VerificationReport) -> None:
    for warning in report.integrity:
        print_warning(str(warning))

    if report.missing:
        console.print(f"\n[removed]Missing packages ({len(report.missing)}):[/]")
        print_list(*preview(report.missing), marker="-", style="removed")

    if report.mismatches:
        console.print(f"\n[changed]Version mismatches ({len(report.mismatches)}):[/]")
        print_list(*preview(report.mismatches), marker="~", style="changed")

    if report.extra:
        console.print(f"\n[added]New packages not in lock ({len(report.extra)}):[/]")
        print_list(*preview(report.extra), marker="+", style="added")

    console.print()
    console.print("[bold_header]Verification Summary[/]")
    console.print(f"  Matching:    {report.ok_count}")
    console.print(f"  Missing:     {len(report.missing)}")
    console.print(f"  Mismatched:  {len(report.mismatches)}")
    console.print(f"  New:         {len(report.extra)}")


@app.callback(invoke_without_command=True)
def verify_packages(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output the report as JSON.",
        ),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Exit with status 1 when the system differs from the lock.",
        ),
    ] = False,
) -> None:
    """Verify installed packages against the lock file.

    Every locked manual package is checked in parallel. Packages that
    are gone are reported as missing, packages at another version as
    mismatched, and manual packages installed since as new.

    Examples:
        dnfctl verify                  # Human-readable report
        dnfctl verify --json           # Machine-readable report
        dnfctl verify --strict         # Non-zero exit on drift
    """
    if ctx.invoked_subcommand is not None:
        return

    quiet = is_quiet(ctx) or json_output
    settings = get_settings()
    store = get_store(settings)

    try:
        artifact = load_lock(store.paths.lock)
    except LockfileNotFoundError as e:
        print_error(str(e))
        print_info("Run 'dnfctl lock' first.")
        raise typer.Exit(code=1) from e
    except LockfileError as e:
        print_error(f"Invalid lock file: {e}")
        raise typer.Exit(code=1) from e

    adapter = get_adapter(settings)
    if not quiet:
        print_info("Verifying system against lock file...")

    try:
        current_manual = adapter.list_user_installed()
    except QueryError as e:
        print_error(f"Package query failed: {e}")
        raise typer.Exit(code=1) from e

    with make_progress(settings, len(artifact.manual), "Verifying packages", quiet) as progress:
        report = verify_lock(
            artifact,
            adapter,
            get_pool(settings),
            current_manual=current_manual,
            progress=progress,
            expected_checksums=_stored_checksums(store),
        )

    if json_output:
        console.print_json(json.dumps(report.to_dict()))
    else:
        _print_report(report)
        if report.is_clean:
            print_success("System matches lock file")

    if strict and not report.is_clean:
        raise typer.Exit(code=1)
