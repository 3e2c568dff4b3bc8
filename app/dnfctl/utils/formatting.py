"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dnfctl.core.theme import get_theme

if TYPE_CHECKING:
    from dnfctl.models.package import PackageRecord


def _detect_color_system() -> str | None:
    """Return "truecolor" for interactive terminals, None to let Rich decide."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_record_table(title: str) -> Table:
    """Create a pre-configured table for displaying locked packages.

    Args:
        title: Table title.

    Returns:
        Rich Table with package, version, arch, size and repository columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Package", style="package_manual", no_wrap=True)
    table.add_column("Version", style="muted")
    table.add_column("Arch", style="muted")
    table.add_column("Size", style="info", justify="right")
    table.add_column("Repository", style="text")
    return table


def format_record_row(record: PackageRecord) -> tuple[str, str, str, str, str]:
    """Format a package record as a table row."""
    return (
        record.name,
        record.evr,
        record.arch,
        record.size_human,
        record.repository or "[warning]unknown[/]",
    )


def print_list(
    items: Sequence[object],
    remaining: int,
    marker: str = "-",
    style: str = "text",
) -> None:
    """Print a bulleted list followed by a '+N more' line when truncated.

    Args:
        items: Items to show.
        remaining: Number of items not shown.
        marker: Bullet character.
        style: Rich style for the items.
    """
    for item in items:
        console.print(f"  [{style}]{marker} {escape(str(item))}[/]", highlight=False)
    if remaining > 0:
        console.print(f"  [muted]... +{remaining} more[/]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")
