"""Export command implementation.

Packs the package lists, lock file and system metadata into an archive.
"""

import typer

from dnfctl.cli.types import exit_precondition, get_settings, get_store, make_stamp
from dnfctl.core.archive import ArchiveError, export_environment
from dnfctl.core.store import PreconditionMissingError
from dnfctl.core.system import collect_system_metadata, get_hostname
from dnfctl.models.package import format_size
from dnfctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Export the environment as a shareable archive.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def export_archive(ctx: typer.Context) -> None:
    """Export the package environment.

    Writes fedora-env-<host>-<timestamp>.tar.gz into the package
    directory. Requires a lock file; run 'dnfctl lock' first.

    Examples:
        dnfctl export
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings()
    store = get_store(settings)

    print_info("Exporting Fedora environment...")
    try:
        archive = export_environment(
            store.paths,
            collect_system_metadata(settings.max_parallel_jobs),
            get_hostname(),
            make_stamp(),
        )
    except PreconditionMissingError as e:
        exit_precondition(e)
    except ArchiveError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success("Environment exported successfully")
    console.print(f"  Archive: [info]{archive}[/]")
    console.print(f"  Size: {format_size(archive.stat().st_size)}")
    console.print("\n[muted]Share this file to replicate your environment on another system.[/]")
