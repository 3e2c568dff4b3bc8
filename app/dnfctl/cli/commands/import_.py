"""Import command implementation.

Replaces the package directory with the contents of an exported archive.
"""

from pathlib import Path
from typing import Annotated

import typer

from dnfctl.cli.types import get_settings, make_stamp
from dnfctl.core.archive import ArchiveError, import_environment
from dnfctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Import an environment from an archive.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def import_archive(
    ctx: typer.Context,
    archive: Annotated[
        Path,
        typer.Argument(
            help="Archive created by 'dnfctl export'.",
        ),
    ],
) -> None:
    """Import an environment from an archive.

    The current package directory is moved aside to
    <package_dir>.backup-<timestamp> before the archive is extracted.

    Examples:
        dnfctl import fedora-env-laptop-20260101-120000.tar.gz
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings()
    print_info("Importing Fedora environment from archive...")

    try:
        result = import_environment(archive, settings.package_dir.expanduser(), make_stamp())
    except ArchiveError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if result.backup_dir is not None:
        console.print(f"  Previous environment moved to: [muted]{result.backup_dir}[/]")

    if result.metadata:
        console.print("\n[bold_header]Imported Environment Info[/]")
        for section, values in result.metadata.items():
            if isinstance(values, dict):
                for key, value in values.items():
                    console.print(f"  {section}.{key}: {value}", highlight=False)

    print_success("Environment imported successfully")
    print_info("Run 'dnfctl verify' to check compatibility.")
    print_info("Run 'dnfctl restore' to install packages.")
