"""Restore command implementation.

Installs the locked manual packages that are missing from the system.
"""

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
from dnfctl.core.lockfile import LockfileError, LockfileNotFoundError, load_lock
from dnfctl.core.restore import plan_restore
from dnfctl.core.verify import preview
from dnfctl.operators.dnf import DnfInstaller
from dnfctl.utils.formatting import (
    console,
    print_error,
    print_info,
    print_list,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Install packages from the lock file.",
    invoke_without_command=True,
)

PLAN_PREVIEW_LIMIT = 20


def _confirm_install(count: int) -> bool:
    """Prompt the user to confirm the installation."""
    return typer.confirm(f"\nInstall {count} package(s) from the lock file?", default=False)


@app.callback(invoke_without_command=True)
def restore_packages(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt and proceed.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Let dnf resolve the transaction without installing.",
        ),
    ] = False,
) -> None:
    """Install locked manual packages that are not installed.

    Packages are requested at their exact locked version
    (name-version-release.arch). Packages that are already installed,
    at any version, are left alone.

    Examples:
        dnfctl restore                 # Prompt, then install
        dnfctl restore --yes           # Install without prompting
        dnfctl restore --dry-run       # Show what dnf would do
    """
    if ctx.invoked_subcommand is not None:
        return

    quiet = is_quiet(ctx)
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
    print_info(f"Found {len(artifact.manual)} packages in lock file")

    with make_progress(settings, len(artifact.manual), "Checking packages", quiet) as progress:
        plan = plan_restore(artifact, adapter, get_pool(settings), progress)

    console.print(f"  Already installed: [info]{len(plan.already_installed)}[/]")
    if plan.is_empty:
        print_success("All packages from lock file are already installed")
        return

    console.print(f"  Need to install:   [warning]{len(plan.to_install)}[/]")
    print_list(*preview(plan.specs, PLAN_PREVIEW_LIMIT), marker="+", style="added")

    if not dry_run and not yes and not _confirm_install(len(plan.to_install)):
        print_info("Installation cancelled.")
        raise typer.Exit(code=0)

    installer = DnfInstaller(dry_run=dry_run)
    try:
        status = installer.install(plan.specs)
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if dry_run:
        print_info("Dry-run mode: No changes were made.")
    elif status == 0:
        print_success("Restoration completed successfully")
    else:
        print_warning("Some packages may have failed to install")
        raise typer.Exit(code=status)
