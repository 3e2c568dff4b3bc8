"""Analyze command implementation.

Classifies installed packages into defaults, manual packages and auto
dependencies and writes the manual and auto name lists.
"""

import json
from typing import Annotated

import typer

from dnfctl.cli.types import (
    exit_precondition,
    get_adapter,
    get_settings,
    get_store,
    make_stamp,
)
from dnfctl.core.classifier import Classification, classify, collect_installed_sets
from dnfctl.core.store import DefaultsMissingError, PackageStore, PreconditionMissingError
from dnfctl.query.base import QueryAdapter, QueryError
from dnfctl.utils.formatting import console, print_error, print_info, print_list

app = typer.Typer(
    help="Identify manually installed packages and their dependencies.",
    invoke_without_command=True,
)

TOP_PACKAGES = 10


def run_analysis(adapter: QueryAdapter, store: PackageStore, stamp: str) -> Classification:
    """Classify the installed packages and save the name lists.

    Args:
        adapter: Query adapter to use.
        store: Package store holding the default list.
        stamp: Timestamp for backups of the previous lists.

    Returns:
        The new Classification.

    Raises:
        DefaultsMissingError: If defaults were never captured.
        QueryError: If the package lists cannot be read.
    """
    defaults = store.load_defaults()
    installed_all, installed_by_user = collect_installed_sets(adapter)
    classification = classify(installed_all, installed_by_user, defaults)
    store.save_classification(classification, stamp=stamp)
    return classification


def show_summary(classification: Classification) -> None:
    """Print the distribution of the classified packages."""
    rows = (
        ("Default Fedora", "package_default", len(classification.defaults)),
        ("Manually installed", "package_manual", len(classification.manual)),
        ("Auto dependencies", "package_auto", len(classification.auto_dependencies)),
    )
    console.print()
    console.print("[bold_header]Package Analysis Summary[/]")
    console.print(f"  Total packages:      {classification.total}")
    for label, style, count in rows:
        console.print(
            f"  {label + ':':<20} [{style}]{count}[/] ({classification.share(count):.1f}%)"
        )


@app.callback(invoke_without_command=True)
def analyze_packages(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output the classification as JSON.",
        ),
    ] = False,
) -> None:
    """Classify installed packages and save the manual and auto lists.

    Manual packages are user-installed packages that are not defaults.
    Auto dependencies are the remaining non-default packages.
    Existing lists are backed up before they are replaced.

    Examples:
        dnfctl analyze                 # Classify and show a summary
        dnfctl analyze --json          # Machine-readable output
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings()
    store = get_store(settings)
    if not store.has_defaults():
        exit_precondition(DefaultsMissingError())

    adapter = get_adapter(settings)

    if not json_output:
        print_info("Analyzing installed packages (excluding defaults)...")

    try:
        classification = run_analysis(adapter, store, make_stamp())
    except PreconditionMissingError as e:
        exit_precondition(e)
    except QueryError as e:
        print_error(f"Package query failed: {e}")
        raise typer.Exit(code=1) from e
    except OSError as e:
        print_error(f"Failed to write package lists: {e}")
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps(classification.to_dict()))
        return

    show_summary(classification)

    if classification.manual:
        console.print(f"\n[header]Top {TOP_PACKAGES} Custom Packages:[/]")
        shown = list(classification.manual[:TOP_PACKAGES])
        print_list(shown, len(classification.manual) - len(shown))

    console.print(f"\n[muted]Files saved in: {settings.paths.outputs_dir}[/]")
