"""Package models for inventory and lock data.

This module defines the core data structures for representing
installed RPM packages and the repositories they came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Field separator used by lock records and rpm query output
FIELD_SEPARATOR = "|"

# Lock file comment and section markers, never valid at the start of a name
RESERVED_PREFIXES = ("#", "[")


def format_size(size_bytes: int) -> str:
    """Return a human-readable size string (e.g., '1.5 MB')."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


@dataclass(frozen=True, slots=True)
class PackageRecord:
    """Represents an installed package enriched with exact metadata.

    This is an immutable data structure produced by batch enrichment
    and persisted in the lock file.

    Attributes:
        name: Package name (e.g., 'neovim', 'python3-requests')
        version: Upstream version string (e.g., '0.10.2')
        release: Distribution release string (e.g., '1.fc41')
        arch: Package architecture (e.g., 'x86_64', 'noarch')
        size_bytes: Installed size in bytes
        install_time: Installation time as a Unix epoch
        repository: Repository the package was installed from, empty if unknown
    """

    name: str
    version: str
    release: str
    arch: str
    size_bytes: int = field(default=0)
    install_time: int = field(default=0)
    repository: str = field(default="")

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.name:
            msg = "Package name cannot be empty"
            raise ValueError(msg)
        if self.name.startswith(RESERVED_PREFIXES) or self.name != self.name.strip():
            msg = f"Invalid package name: {self.name!r}"
            raise ValueError(msg)
        if not self.version:
            msg = "Package version cannot be empty"
            raise ValueError(msg)
        for value in (self.name, self.version, self.release, self.arch, self.repository):
            if FIELD_SEPARATOR in value or "\n" in value:
                msg = f"Package fields cannot contain '|' or newlines: {value!r}"
                raise ValueError(msg)

    @property
    def evr(self) -> str:
        """Return the version-release string (e.g., '1.0-1.fc41')."""
        return f"{self.version}-{self.release}"

    @property
    def label(self) -> str:
        """Return the name-version-release label used in reports."""
        return f"{self.name}-{self.evr}"

    @property
    def nevra(self) -> str:
        """Return the name-version-release.arch install spec."""
        return f"{self.label}.{self.arch}"

    @property
    def has_repository(self) -> bool:
        """Check if the originating repository is known."""
        return bool(self.repository)

    @property
    def size_human(self) -> str:
        """Return human-readable size string."""
        return format_size(self.size_bytes)

    def with_repository(self, repository: str) -> PackageRecord:
        """Return a copy of this record with the given repository."""
        return PackageRecord(
            name=self.name,
            version=self.version,
            release=self.release,
            arch=self.arch,
            size_bytes=self.size_bytes,
            install_time=self.install_time,
            repository=repository,
        )


@dataclass(frozen=True, slots=True)
class RepositoryEntry:
    """A package repository and whether it is enabled.

    Attributes:
        name: Repository identifier (e.g., 'fedora', 'updates').
        enabled: Whether the repository is enabled.
    """

    name: str
    enabled: bool = True

    def __post_init__(self) -> None:
        """Validate repository data after initialization."""
        if not self.name:
            msg = "Repository name cannot be empty"
            raise ValueError(msg)
        if self.name.startswith(RESERVED_PREFIXES) or FIELD_SEPARATOR in self.name:
            msg = f"Invalid repository name: {self.name!r}"
            raise ValueError(msg)

    @property
    def state(self) -> str:
        """Return 'enabled' or 'disabled'."""
        return "enabled" if self.enabled else "disabled"
