"""Data models for dnfctl.

This module exports the core data structures used throughout the application.
"""

from dnfctl.models.lockfile import Checksums, LockArtifact, SystemMetadata
from dnfctl.models.package import PackageRecord, RepositoryEntry

__all__ = [
    "Checksums",
    "LockArtifact",
    "PackageRecord",
    "RepositoryEntry",
    "SystemMetadata",
]
