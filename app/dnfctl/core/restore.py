"""Planning the reinstallation of locked packages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dnfctl.query.base import LookupFailure

if TYPE_CHECKING:
    from dnfctl.core.pool import ChunkedWorkerPool
    from dnfctl.core.progress import ProgressTracker
    from dnfctl.models.lockfile import LockArtifact
    from dnfctl.models.package import PackageRecord
    from dnfctl.query.base import QueryAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RestorePlan:
    """Locked manual packages split by installation state.

    Attributes:
        to_install: Records whose package is not installed.
        already_installed: Records whose package is installed (any version).
    """

    to_install: tuple[PackageRecord, ...] = field(default=())
    already_installed: tuple[PackageRecord, ...] = field(default=())

    @property
    def specs(self) -> list[str]:
        """Exact install specs (name-version-release.arch) for dnf."""
        return [record.nevra for record in self.to_install]

    @property
    def is_empty(self) -> bool:
        return not self.to_install


def _is_installed(adapter: QueryAdapter, record: PackageRecord) -> tuple[PackageRecord, bool]:
    try:
        return record, adapter.metadata(record.name) is not None
    except LookupFailure:
        return record, False


def plan_restore(
    artifact: LockArtifact,
    adapter: QueryAdapter,
    pool: ChunkedWorkerPool,
    progress: ProgressTracker | None = None,
) -> RestorePlan:
    """Work out which locked manual packages need installing.

    Args:
        artifact: Parsed lock artifact.
        adapter: Query adapter used to check installation state.
        pool: Worker pool to run the checks on.
        progress: Optional progress tracker.

    Returns:
        RestorePlan preserving lock order.
    """
    result = pool.run(artifact.manual, lambda record: _is_installed(adapter, record), progress)

    to_install: list[PackageRecord] = []
    installed: list[PackageRecord] = []
    for record, is_installed in result.results:
        (installed if is_installed else to_install).append(record)
    to_install.extend(skipped.item for skipped in result.skipped)

    logger.debug("Restore plan: %d to install, %d present", len(to_install), len(installed))
    return RestorePlan(to_install=tuple(to_install), already_installed=tuple(installed))
