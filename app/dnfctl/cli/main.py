"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from dnfctl import __version__
from dnfctl.cli.commands import (
    analyze,
    diff,
    export,
    import_,
    init,
    lock,
    restore,
    stats,
    tree,
    verify,
)
from dnfctl.utils.formatting import err_console

app = typer.Typer(
    name="dnfctl",
    help="Package inventory and lock files for Fedora.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dnfctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route dnfctl log records to the error console.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    logger = logging.getLogger("dnfctl")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=err_console, show_path=verbose, rich_tracebacks=verbose)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.propagate = False


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output.",
        ),
    ] = False,
) -> None:
    """dnfctl - Package inventory and lock files for Fedora.

    Separates the packages you installed from the base OS and their
    dependencies, and locks their exact versions so the environment
    can be verified, exported and restored.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(init.app, name="init")
app.add_typer(analyze.app, name="analyze")
app.add_typer(lock.app, name="lock")
app.add_typer(verify.app, name="verify")
app.add_typer(restore.app, name="restore")
app.add_typer(tree.app, name="tree")
app.add_typer(stats.app, name="stats")
app.add_typer(diff.app, name="diff")
app.add_typer(export.app, name="export")
app.add_typer(import_.app, name="import")


if __name__ == "__main__":
    app()
