"""Stats command implementation.

Shows package distribution, category counts and lock file info.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from dnfctl.cli.types import exit_precondition, get_settings, get_store
from dnfctl.core.lockfile import LockfileParseError
from dnfctl.core.stats import PackageStatistics, compute_statistics, lock_info
from dnfctl.core.store import PreconditionMissingError
from dnfctl.models.package import format_size
from dnfctl.utils.formatting import console, print_warning

app = typer.Typer(
    help="Show package statistics.",
    invoke_without_command=True,
)


def _distribution_table(stats: PackageStatistics) -> Table:
    table = Table(
        title="Package Distribution",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Category")
    table.add_column("Packages", justify="right")
    table.add_column("Share", justify="right", style="muted")
    rows = (
        ("Default Fedora", "package_default", stats.defaults),
        ("Custom installed", "package_manual", stats.manual),
        ("Dependencies", "package_auto", stats.auto),
    )
    for label, style, count in rows:
        table.add_row(label, f"[{style}]{count}[/]", f"{stats.share(count):.1f}%")
    table.add_row("[bold]Total[/]", f"[bold]{stats.total}[/]", "")
    return table


@app.callback(invoke_without_command=True)
def show_stats(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output statistics as JSON.",
        ),
    ] = False,
) -> None:
    """Show package statistics.

    Requires the lists written by 'dnfctl analyze'. The default list is
    optional and counts as empty when it was never captured.

    Examples:
        dnfctl stats
        dnfctl stats --json
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings()
    store = get_store(settings)

    try:
        manual = store.load_manual()
        auto = store.load_auto()
    except PreconditionMissingError as e:
        exit_precondition(e)
    defaults = store.load_defaults() if store.has_defaults() else ()

    stats = compute_statistics(manual, auto, defaults)
    try:
        info = lock_info(store.paths.lock)
    except LockfileParseError as e:
        print_warning(f"Lock file is malformed: {e}")
        info = None

    if json_output:
        data: dict[str, object] = {
            "total": stats.total,
            "defaults": stats.defaults,
            "manual": stats.manual,
            "auto": stats.auto,
            "categories": dict(stats.categories),
        }
        if info is not None:
            data["lock"] = {
                "generated": info.generated.isoformat() if info.generated else None,
                "size_bytes": info.size_bytes,
                "locked_packages": info.locked_packages,
            }
        console.print_json(json.dumps(data))
        return

    console.print(_distribution_table(stats))

    console.print("\n[header]Custom Package Categories:[/]")
    for category, count in stats.categories:
        console.print(f"  {category + ':':<13} {count}")

    if info is not None:
        console.print("\n[header]Lock File Info:[/]")
        created = info.generated.isoformat() if info.generated else "unknown"
        console.print(f"  Created: {created}")
        console.print(f"  Size: {format_size(info.size_bytes)}")
        console.print(f"  Locked packages: {info.locked_packages}")
