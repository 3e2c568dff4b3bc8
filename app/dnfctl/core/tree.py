"""Shallow dependency tree of manual packages."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dnfctl.core.pool import ChunkedWorkerPool, SkippedItem
    from dnfctl.core.progress import ProgressTracker
    from dnfctl.query.base import QueryAdapter

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_LIMIT = 20
DEFAULT_DEPENDENCY_LIMIT = 5
BRANCH = "  └── "


@dataclass(frozen=True, slots=True)
class TreeNode:
    """A package and the first few packages it requires.

    Attributes:
        name: Package name.
        requires: Required package names, truncated.
    """

    name: str
    requires: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DependencyTree:
    """Dependency tree built for the first manual packages.

    Attributes:
        nodes: One node per resolved package, in manual list order.
        skipped: Packages whose requirements could not be resolved.
    """

    nodes: tuple[TreeNode, ...]
    skipped: tuple[SkippedItem[str], ...] = ()


def build_dependency_tree(
    manual_names: Sequence[str],
    adapter: QueryAdapter,
    pool: ChunkedWorkerPool,
    limit: int = DEFAULT_PACKAGE_LIMIT,
    per_package: int = DEFAULT_DEPENDENCY_LIMIT,
    progress: ProgressTracker | None = None,
) -> DependencyTree:
    """Resolve the requirements of the first ``limit`` manual packages.

    Args:
        manual_names: Sorted manual package names.
        adapter: Query adapter used to resolve requirements.
        pool: Worker pool to run the lookups on.
        limit: Number of manual packages to include.
        per_package: Number of requirements kept per package.
        progress: Optional progress tracker.

    Returns:
        DependencyTree in manual list order.
    """
    selected = list(manual_names[:limit])

    def resolve(name: str) -> TreeNode:
        return TreeNode(name=name, requires=tuple(adapter.requires(name)[:per_package]))

    result = pool.run(selected, resolve, progress=progress)
    for skipped in result.skipped:
        logger.info("No dependency data for %s: %s", skipped.item, skipped.reason)
    return DependencyTree(nodes=tuple(result.results), skipped=tuple(result.skipped))


def render_tree(tree: DependencyTree, generated_at: datetime | None = None) -> str:
    """Render the tree as plain text.

    Args:
        tree: Tree to render.
        generated_at: Timestamp for the header. Defaults to now.

    Returns:
        Text content, newline-terminated.
    """
    stamp = (generated_at or datetime.now()).replace(microsecond=0).isoformat()
    lines = [
        "Dependency Tree for Custom Packages",
        "====================================",
        f"Generated: {stamp}",
        "",
    ]
    for node in tree.nodes:
        lines.append(node.name)
        lines.extend(f"{BRANCH}{dep}" for dep in node.requires)
        lines.append("")
    return "\n".join(lines) + "\n"
