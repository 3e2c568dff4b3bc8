"""Init command implementation.

Captures the default package set of the base OS and builds the first
classification and lock file.
"""

from typing import Annotated

import typer

from dnfctl.cli.commands.analyze import run_analysis, show_summary
from dnfctl.cli.commands.lock import create_lock, report_enrichment
from dnfctl.cli.types import (
    exit_precondition,
    get_adapter,
    get_pool,
    get_settings,
    get_store,
    is_quiet,
    make_stamp,
)
from dnfctl.core.defaults import DEFAULT_GROUPS, capture_defaults
from dnfctl.core.lockfile import LockfileError
from dnfctl.core.store import PreconditionMissingError
from dnfctl.query.base import QueryError
from dnfctl.utils.formatting import console, print_error, print_info, print_success, print_warning

app = typer.Typer(
    help="Capture default packages and create the initial lock file.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def init_environment(
    ctx: typer.Context,
    defaults_only: Annotated[
        bool,
        typer.Option(
            "--defaults-only",
            "-d",
            help="Only capture the default package list.",
        ),
    ] = False,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Recapture defaults even if a list already exists.",
        ),
    ] = False,
) -> None:
    """Initialize the package environment.

    Captures the packages that belong to the base Fedora install (comps
    groups plus essential packages), then analyzes the installed
    packages and writes the initial lock file. Run this on a freshly
    installed system for the most accurate defaults.

    Examples:
        dnfctl init                    # Capture defaults, analyze, lock
        dnfctl init --defaults-only    # Only capture defaults
        dnfctl init --force            # Replace an existing default list
    """
    if ctx.invoked_subcommand is not None:
        return

    quiet = is_quiet(ctx)
    settings = get_settings()
    store = get_store(settings)
    adapter = get_adapter(settings)
    stamp = make_stamp()

    if store.has_defaults() and not force:
        print_warning(f"Default packages list already exists: {store.paths.defaults}")
        print_info("Use --force to recapture it.")
    else:
        print_info(f"Capturing default packages from groups: {', '.join(DEFAULT_GROUPS)}")
        defaults = capture_defaults(adapter)
        try:
            store.save_defaults(defaults, stamp=stamp)
        except OSError as e:
            print_error(f"Failed to write default packages list: {e}")
            raise typer.Exit(code=1) from e
        print_success(f"Identified {len(defaults)} default packages")

    if defaults_only:
        return

    try:
        classification = run_analysis(adapter, store, stamp)
        if not quiet:
            show_summary(classification)
        _, manual, auto = create_lock(settings, adapter, get_pool(settings), store, quiet)
    except PreconditionMissingError as e:
        exit_precondition(e)
    except QueryError as e:
        print_error(f"Package query failed: {e}")
        raise typer.Exit(code=1) from e
    except (LockfileError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    report_enrichment(manual, auto)
    console.print()
    print_success("Environment initialized successfully")
    console.print(f"  Default packages saved to: [muted]{store.paths.defaults}[/]")
    console.print(f"  Lock file: [muted]{store.paths.lock}[/]")
