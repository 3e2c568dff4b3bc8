"""Batch enrichment of package names with exact metadata.

Each name is looked up through the query adapter on the chunked
worker pool. Packages that are no longer installed are skipped;
packages whose repository cannot be resolved are kept with an empty
repository field.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dnfctl.query.base import LookupFailure

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dnfctl.core.pool import ChunkedWorkerPool, SkippedItem
    from dnfctl.core.progress import ProgressTracker
    from dnfctl.models.package import PackageRecord
    from dnfctl.query.base import QueryAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EnrichmentResult:
    """Records produced by a batch enrichment pass.

    Attributes:
        records: Enriched records, in input order.
        skipped: Names that could not be enriched, with the reason.
    """

    records: tuple[PackageRecord, ...]
    skipped: tuple[SkippedItem[str], ...]

    @property
    def degraded(self) -> tuple[PackageRecord, ...]:
        """Records whose repository could not be resolved."""
        return tuple(r for r in self.records if not r.has_repository)


def lookup_record(adapter: QueryAdapter, name: str) -> PackageRecord:
    """Fetch the full record of one package.

    Args:
        adapter: Query adapter to use.
        name: Package name.

    Returns:
        Record with repository filled in when it can be resolved.

    Raises:
        LookupFailure: If the package is not installed or the lookup fails.
    """
    record = adapter.metadata(name)
    if record is None:
        msg = f"{name} is not installed"
        raise LookupFailure(msg)

    try:
        repository = adapter.repository(name)
    except LookupFailure as e:
        logger.debug("Repository lookup failed for %s: %s", name, e)
        repository = None

    return record.with_repository(repository or "")


def enrich_packages(
    names: Sequence[str],
    adapter: QueryAdapter,
    pool: ChunkedWorkerPool,
    progress: ProgressTracker | None = None,
) -> EnrichmentResult:
    """Enrich package names with version, size, install time and repository.

    Args:
        names: Package names to enrich.
        adapter: Query adapter used by every worker.
        pool: Worker pool to run the lookups on.
        progress: Optional progress tracker.

    Returns:
        EnrichmentResult with records in the order of ``names``.
    """
    result = pool.run(names, lambda name: lookup_record(adapter, name), progress=progress)

    for skipped in result.skipped:
        logger.info("Skipping %s: %s", skipped.item, skipped.reason)

    return EnrichmentResult(records=tuple(result.results), skipped=tuple(result.skipped))
