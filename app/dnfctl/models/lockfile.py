"""Lock file models.

This module defines the immutable data structures that make up a
lock file: the system it was taken on, the locked package records,
the repositories and the checksums of the classification inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dnfctl.models.package import PackageRecord, RepositoryEntry


@dataclass(frozen=True, slots=True)
class SystemMetadata:
    """Description of the machine a lock file was generated on.

    Attributes:
        os_release: Contents of /etc/fedora-release (or 'Unknown').
        kernel: Running kernel release.
        architecture: Machine architecture.
        parallel_jobs: Worker count used while locking.
    """

    os_release: str = "Unknown"
    kernel: str = "Unknown"
    architecture: str = "Unknown"
    parallel_jobs: int = 1


@dataclass(frozen=True, slots=True)
class Checksums:
    """SHA-256 checksums of the manual and auto name lists.

    Attributes:
        manual: Hex digest of the manual package name list.
        auto: Hex digest of the auto dependency name list.
    """

    manual: str = ""
    auto: str = ""


@dataclass(frozen=True, slots=True)
class LockArtifact:
    """Snapshot of classified packages with exact versions.

    Attributes:
        generated_at: Timestamp when the lock was built.
        system: Metadata of the machine the lock was taken on.
        manual: Locked manually installed packages, in list order.
        auto: Locked auto dependencies, in list order.
        repositories: Repositories known at lock time.
        checksums: Checksums of the classification input lists.
    """

    generated_at: datetime
    system: SystemMetadata
    manual: tuple[PackageRecord, ...] = field(default=())
    auto: tuple[PackageRecord, ...] = field(default=())
    repositories: tuple[RepositoryEntry, ...] = field(default=())
    checksums: Checksums = field(default_factory=Checksums)

    @property
    def manual_names(self) -> list[str]:
        """Names of the locked manual packages, in lock order."""
        return [record.name for record in self.manual]

    @property
    def auto_names(self) -> list[str]:
        """Names of the locked auto dependencies, in lock order."""
        return [record.name for record in self.auto]

    @property
    def record_count(self) -> int:
        """Total number of locked package records."""
        return len(self.manual) + len(self.auto)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "generated_at": self.generated_at.isoformat(),
            "system": {
                "os_release": self.system.os_release,
                "kernel": self.system.kernel,
                "architecture": self.system.architecture,
                "parallel_jobs": self.system.parallel_jobs,
            },
            "manual": [_record_to_dict(r) for r in self.manual],
            "auto": [_record_to_dict(r) for r in self.auto],
            "repositories": [{"name": r.name, "enabled": r.enabled} for r in self.repositories],
            "checksums": {"manual": self.checksums.manual, "auto": self.checksums.auto},
        }


def _record_to_dict(record: PackageRecord) -> dict[str, Any]:
    """Convert a PackageRecord to a dictionary.

    Args:
        record: The record to convert.

    Returns:
        Dictionary representation of the record.
    """
    return {
        "name": record.name,
        "version": record.version,
        "release": record.release,
        "arch": record.arch,
        "size_bytes": record.size_bytes,
        "install_time": record.install_time,
        "repository": record.repository,
    }
