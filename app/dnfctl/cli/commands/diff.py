"""Diff command implementation.

Compares the manual packages in the lock file with the packages the
user has installed now.
"""

import json
from typing import Annotated

import typer

from dnfctl.cli.types import get_adapter, get_settings, get_store
from dnfctl.core.diff import LockDiff, diff_lock
from dnfctl.core.lockfile import LockfileError, LockfileNotFoundError, load_lock
from dnfctl.core.verify import preview
from dnfctl.query.base import QueryError
from dnfctl.utils.formatting import console, print_error, print_info, print_list, print_success

app = typer.Typer(
    help="Compare the current system with the lock file.",
    invoke_without_command=True,
)

DIFF_PREVIEW_LIMIT = 20


def _print_summary(result: LockDiff) -> None:
    console.print()
    console.print("[bold_header]Summary[/]")
    console.print(f"  Common packages: {len(result.common)}")
    console.print(f"  Only in lock file: [removed]{len(result.only_in_lock)}[/]")
    console.print(f"  Only on current system: [added]{len(result.only_on_system)}[/]")


@app.callback(invoke_without_command=True)
def diff_packages(
    ctx: typer.Context,
    brief: Annotated[
        bool,
        typer.Option(
            "--brief",
            "-b",
            help="Show summary counts only.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Compare user-installed packages with the lock file.

    Difference types:
      [-] Only in lock file: locked but not installed (restore would install)
      [+] Only on system: installed but not locked

    Examples:
        dnfctl diff                    # Lists and summary
        dnfctl diff --brief            # Summary counts only
        dnfctl diff --json             # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

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
    try:
        current = adapter.list_user_installed()
    except QueryError as e:
        print_error(f"Package query failed: {e}")
        raise typer.Exit(code=1) from e

    result = diff_lock(artifact.manual_names, current)

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
        return

    if not brief:
        console.print("\n[header]Packages only in lock file (need to install):[/]")
        print_list(*preview(result.only_in_lock, DIFF_PREVIEW_LIMIT), marker="-", style="removed")
        console.print("\n[header]Packages only on current system (not in lock):[/]")
        print_list(*preview(result.only_on_system, DIFF_PREVIEW_LIMIT), marker="+", style="added")

    _print_summary(result)
    if result.is_in_sync:
        print_success("System is in sync with lock file.")
