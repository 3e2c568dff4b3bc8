"""Tree command implementation.

Writes a shallow dependency tree of the manual packages.
"""

from typing import Annotated

import typer

from dnfctl.cli.types import (
    exit_precondition,
    get_adapter,
    get_pool,
    get_settings,
    get_store,
    is_quiet,
    make_progress,
)
from dnfctl.core.store import PackageStore, PreconditionMissingError
from dnfctl.core.tree import (
    DEFAULT_DEPENDENCY_LIMIT,
    DEFAULT_PACKAGE_LIMIT,
    build_dependency_tree,
    render_tree,
)
from dnfctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Build a dependency tree of custom packages.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def show_tree(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-l",
            min=1,
            help="Number of manual packages to include.",
        ),
    ] = DEFAULT_PACKAGE_LIMIT,
    depth: Annotated[
        int,
        typer.Option(
            "--per-package",
            "-p",
            min=1,
            help="Dependencies shown per package.",
        ),
    ] = DEFAULT_DEPENDENCY_LIMIT,
    print_tree: Annotated[
        bool,
        typer.Option(
            "--print",
            help="Also print the tree to the terminal.",
        ),
    ] = False,
) -> None:
    """Build a dependency tree for custom packages.

    Resolves the requirements of the first manual packages and saves
    the tree to outputs/dependency-tree.txt.

    Examples:
        dnfctl tree                    # First 20 packages, 5 deps each
        dnfctl tree --limit 50 --print
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings()
    store: PackageStore = get_store(settings)

    try:
        manual = store.load_manual()
    except PreconditionMissingError as e:
        exit_precondition(e)

    adapter = get_adapter(settings)
    print_info("Building dependency tree (excluding defaults)...")

    selected = min(limit, len(manual))
    with make_progress(settings, selected, "Resolving dependencies", is_quiet(ctx)) as progress:
        tree = build_dependency_tree(
            manual,
            adapter,
            get_pool(settings),
            limit=limit,
            per_package=depth,
            progress=progress,
        )

    text = render_tree(tree)
    try:
        store.paths.dependency_tree.write_text(text, encoding="utf-8")
    except OSError as e:
        print_error(f"Failed to write dependency tree: {e}")
        raise typer.Exit(code=1) from e

    if print_tree:
        console.print(text, highlight=False, markup=False)
    print_success(f"Dependency tree saved to: {store.paths.dependency_tree}")
