"""Export and import of a package environment as a tar.gz archive.

An archive holds the three name lists, the lock file and a
metadata.toml describing the machine it was exported from. Member
names are relative to the package directory, so extracting into an
empty package directory restores the original layout.
"""

from __future__ import annotations

import io
import logging
import shutil
import tarfile
import tomllib
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w

from dnfctl.core.store import PreconditionMissingError

if TYPE_CHECKING:
    from dnfctl.core.paths import PackagePaths
    from dnfctl.models.lockfile import SystemMetadata

logger = logging.getLogger(__name__)

METADATA_NAME = "metadata.toml"
ARCHIVE_PREFIX = "fedora-env"


class ArchiveError(Exception):
    """Raised when an archive cannot be written or read."""


class LockMissingError(PreconditionMissingError):
    """Raised when exporting without a lock file."""

    def __init__(self, message: str = "Lock file not found") -> None:
        super().__init__(message, hint="Run 'dnfctl lock' first.")


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of importing an archive.

    Attributes:
        package_dir: Directory the archive was extracted into.
        backup_dir: Where the previous package directory was moved, if any.
        members: Extracted member names.
        metadata: Parsed metadata.toml, empty if the archive had none.
    """

    package_dir: Path
    backup_dir: Path | None
    members: tuple[str, ...]
    metadata: dict[str, Any]


def archive_name(hostname: str, stamp: str) -> str:
    """Return the archive file name for a host and timestamp."""
    return f"{ARCHIVE_PREFIX}-{hostname}-{stamp}.tar.gz"


def build_metadata(
    system: SystemMetadata,
    hostname: str,
    manual_count: int,
    auto_count: int,
    exported_at: datetime | None = None,
) -> dict[str, Any]:
    """Assemble the metadata document stored in an archive."""
    return {
        "export": {
            "date": (exported_at or datetime.now(UTC)).replace(microsecond=0),
            "hostname": hostname,
        },
        "system": {
            "release": system.os_release,
            "kernel": system.kernel,
            "architecture": system.architecture,
        },
        "packages": {
            "manual": manual_count,
            "dependencies": auto_count,
        },
    }


def _count_lines(path: Path) -> int:
    if not path.exists():
        return 0
    with path.open(encoding="utf-8") as f:
        return sum(1 for line in f if line.strip())


def export_environment(
    paths: PackagePaths,
    system: SystemMetadata,
    hostname: str,
    stamp: str,
) -> Path:
    """Write the package environment to a tar.gz archive.

    Args:
        paths: Package data locations.
        system: Metadata of the exporting machine.
        hostname: Host name used in the archive name.
        stamp: Timestamp used in the archive name.

    Returns:
        Path of the written archive, inside the package directory.

    Raises:
        LockMissingError: If no lock file exists.
        ArchiveError: If the archive cannot be written.
    """
    if not paths.lock.exists():
        raise LockMissingError(f"Lock file not found: {paths.lock}")

    archive_path = paths.package_dir / archive_name(hostname, stamp)
    metadata = build_metadata(
        system,
        hostname,
        manual_count=_count_lines(paths.manual),
        auto_count=_count_lines(paths.auto),
    )
    payload = tomli_w.dumps(metadata).encode("utf-8")

    try:
        with tarfile.open(archive_path, "w:gz") as tar:
            for member in (paths.manual, paths.auto, paths.defaults, paths.lock):
                if member.exists():
                    tar.add(member, arcname=str(member.relative_to(paths.package_dir)))
                else:
                    logger.info("Not exporting missing file %s", member)
            info = tarfile.TarInfo(METADATA_NAME)
            info.size = len(payload)
            info.mtime = int(datetime.now(UTC).timestamp())
            tar.addfile(info, io.BytesIO(payload))
    except (OSError, tarfile.TarError) as e:
        raise ArchiveError(f"Failed to write archive {archive_path}: {e}") from e

    logger.debug("Exported environment to %s", archive_path)
    return archive_path


def import_environment(archive: Path, package_dir: Path, stamp: str) -> ImportResult:
    """Extract an exported archive into the package directory.

    An existing package directory is moved aside to
    ``<package_dir>.backup-<stamp>`` first.

    Args:
        archive: Archive to import.
        package_dir: Destination package directory.
        stamp: Timestamp used for the backup directory name.

    Returns:
        ImportResult.

    Raises:
        ArchiveError: If the archive is missing or cannot be extracted.
    """
    if not archive.is_file():
        raise ArchiveError(f"Archive file not found: {archive}")

    backup_dir: Path | None = None
    if package_dir.exists():
        backup_dir = package_dir.with_name(f"{package_dir.name}.backup-{stamp}")
        source = archive.resolve()
        inside = source.is_relative_to(package_dir.resolve())
        shutil.move(str(package_dir), str(backup_dir))
        logger.info("Moved existing package directory to %s", backup_dir)
        # An archive exported into the package directory moves with it
        if inside:
            archive = backup_dir / source.relative_to(package_dir.resolve())

    package_dir.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive, "r:gz") as tar:
            members = tuple(tar.getnames())
            tar.extractall(package_dir, filter="data")
    except (OSError, tarfile.TarError) as e:
        raise ArchiveError(f"Failed to extract {archive}: {e}") from e

    metadata: dict[str, Any] = {}
    metadata_path = package_dir / METADATA_NAME
    if metadata_path.exists():
        try:
            with open(metadata_path, "rb") as f:
                metadata = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.warning("Ignoring unreadable archive metadata: %s", e)
        metadata_path.unlink()

    return ImportResult(
        package_dir=package_dir,
        backup_dir=backup_dir,
        members=members,
        metadata=metadata,
    )
