"""Verification of a lock artifact against the running system.

Every locked manual record is re-queried through the worker pool and
classified as ok, missing or mismatched. Manual packages installed
since the lock was taken are reported as extra.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from dnfctl.core.sets import PackageSet, difference, to_package_set
from dnfctl.query.base import LookupFailure

if TYPE_CHECKING:
    from dnfctl.core.pool import ChunkedWorkerPool
    from dnfctl.core.progress import ProgressTracker
    from dnfctl.models.lockfile import Checksums, LockArtifact
    from dnfctl.models.package import PackageRecord
    from dnfctl.query.base import QueryAdapter

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_LIMIT = 10

T = TypeVar("T")


class RecordStatus(Enum):
    """Outcome of checking one locked record."""

    OK = "ok"
    MISSING = "missing"
    MISMATCH = "mismatch"


@dataclass(frozen=True, slots=True)
class RecordCheck:
    """Result of checking one locked record against the system.

    Attributes:
        locked: The record from the lock file.
        status: Outcome of the check.
        current_evr: Installed version-release, None when not installed.
    """

    locked: PackageRecord
    status: RecordStatus
    current_evr: str | None = None


@dataclass(frozen=True, slots=True)
class VersionMismatch:
    """A locked package installed at a different version.

    Attributes:
        name: Package name.
        locked_evr: Version-release recorded in the lock file.
        current_evr: Version-release installed now.
    """

    name: str
    locked_evr: str
    current_evr: str

    def __str__(self) -> str:
        return f"{self.name}: locked={self.locked_evr}, current={self.current_evr}"


@dataclass(frozen=True, slots=True)
class IntegrityWarning:
    """A stored name list that no longer matches the lock checksum.

    Attributes:
        list_name: Which list differs ('manual' or 'auto').
        expected: Checksum recorded in the lock file.
        actual: Checksum of the current list file.
    """

    list_name: str
    expected: str
    actual: str

    def __str__(self) -> str:
        return (
            f"{self.list_name} package list changed since the lock was generated "
            f"(lock={self.expected[:12]}, current={self.actual[:12]})"
        )


@dataclass(frozen=True, slots=True)
class VerificationReport:
    """Outcome of verifying a lock artifact.

    Attributes:
        missing: Labels (name-version-release) of locked packages not installed.
        mismatches: Locked packages installed at another version.
        extra: Manual packages installed now that the lock does not contain.
        integrity: Checksum warnings for the stored name lists.
        ok_count: Number of locked records that match exactly.
    """

    missing: tuple[str, ...] = field(default=())
    mismatches: tuple[VersionMismatch, ...] = field(default=())
    extra: PackageSet = field(default=())
    integrity: tuple[IntegrityWarning, ...] = field(default=())
    ok_count: int = 0

    @property
    def checked(self) -> int:
        """Number of locked records checked."""
        return self.ok_count + len(self.missing) + len(self.mismatches)

    @property
    def is_clean(self) -> bool:
        """True when no package is missing, mismatched or extra."""
        return not (self.missing or self.mismatches or self.extra)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "ok": self.ok_count,
            "missing": list(self.missing),
            "mismatches": [
                {"name": m.name, "locked": m.locked_evr, "current": m.current_evr}
                for m in self.mismatches
            ],
            "extra": list(self.extra),
            "integrity": [
                {"list": w.list_name, "expected": w.expected, "actual": w.actual}
                for w in self.integrity
            ],
            "clean": self.is_clean,
        }


def preview(items: Sequence[T], limit: int = DEFAULT_PREVIEW_LIMIT) -> tuple[list[T], int]:
    """Split a list into the items to display and the number left out.

    Args:
        items: Full list of items.
        limit: Maximum number of items shown.

    Returns:
        Tuple of (shown items, remaining count).
    """
    shown = list(items[:limit])
    return shown, len(items) - len(shown)


def check_record(adapter: QueryAdapter, locked: PackageRecord) -> RecordCheck:
    """Compare one locked record with what is installed.

    A failed lookup counts as missing; it is never retried.

    Args:
        adapter: Query adapter to use.
        locked: Record from the lock file.

    Returns:
        RecordCheck for the record.
    """
    try:
        current = adapter.metadata(locked.name)
    except LookupFailure as e:
        logger.debug("Lookup of %s failed, treating as missing: %s", locked.name, e)
        current = None

    if current is None:
        return RecordCheck(locked=locked, status=RecordStatus.MISSING)
    if current.evr != locked.evr:
        return RecordCheck(locked=locked, status=RecordStatus.MISMATCH, current_evr=current.evr)
    return RecordCheck(locked=locked, status=RecordStatus.OK, current_evr=current.evr)


def check_integrity(recorded: Checksums, expected: Checksums) -> tuple[IntegrityWarning, ...]:
    """Compare the lock checksums with checksums of the current list files.

    Empty checksums on either side are not compared.

    Args:
        recorded: Checksums stored in the lock artifact.
        expected: Checksums of the name lists on disk.

    Returns:
        One warning per differing list.
    """
    warnings: list[IntegrityWarning] = []
    pairs = (("manual", recorded.manual, expected.manual), ("auto", recorded.auto, expected.auto))
    for list_name, lock_value, disk_value in pairs:
        if lock_value and disk_value and lock_value != disk_value:
            warnings.append(IntegrityWarning(list_name, expected=lock_value, actual=disk_value))
    return tuple(warnings)


def verify_lock(
    artifact: LockArtifact,
    adapter: QueryAdapter,
    pool: ChunkedWorkerPool,
    *,
    current_manual: PackageSet,
    progress: ProgressTracker | None = None,
    expected_checksums: Checksums | None = None,
) -> VerificationReport:
    """Verify locked manual packages against the system.

    Args:
        artifact: Parsed lock artifact.
        adapter: Query adapter used for lookups.
        pool: Worker pool to run the lookups on.
        current_manual: Sorted manual package names installed now.
        progress: Optional progress tracker.
        expected_checksums: Checksums of the stored list files, if available.

    Returns:
        VerificationReport. Lists keep lock order.
    """
    result = pool.run(artifact.manual, lambda record: check_record(adapter, record), progress)

    missing: list[str] = []
    mismatches: list[VersionMismatch] = []
    ok_count = 0
    for check in result.results:
        if check.status is RecordStatus.MISSING:
            missing.append(check.locked.label)
        elif check.status is RecordStatus.MISMATCH:
            mismatches.append(
                VersionMismatch(
                    name=check.locked.name,
                    locked_evr=check.locked.evr,
                    current_evr=check.current_evr or "",
                )
            )
        else:
            ok_count += 1

    # check_record absorbs lookup failures, anything left is treated as missing
    missing.extend(skipped.item.label for skipped in result.skipped)

    extra = difference(current_manual, to_package_set(artifact.manual_names))
    integrity = (
        check_integrity(artifact.checksums, expected_checksums)
        if expected_checksums is not None
        else ()
    )

    logger.debug(
        "Verified %d records: %d ok, %d missing, %d mismatched, %d extra",
        len(artifact.manual),
        ok_count,
        len(missing),
        len(mismatches),
        len(extra),
    )
    return VerificationReport(
        missing=tuple(missing),
        mismatches=tuple(mismatches),
        extra=extra,
        integrity=integrity,
        ok_count=ok_count,
    )
