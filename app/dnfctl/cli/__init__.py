"""CLI package for dnfctl.

This package contains the Typer application and all subcommands.
"""

from dnfctl.cli.main import app

__all__ = ["app"]
