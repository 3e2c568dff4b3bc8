"""Lock file building, serialization and parsing.

The lock file is a sectioned text file. Header comments carry the
system metadata; each section holds pipe-delimited records:

    [MANUAL_PACKAGES]        name|version|release|arch|size|install_time|repository
    [AUTO_DEPENDENCIES]      same layout
    [REPOSITORIES]           name|enabled
    [CHECKSUMS]              manual_packages|<sha256>, auto_dependencies|<sha256>

Sections must appear in that order. Parsers locate a section by
scanning from its header to the next header, since record counts vary.
"""

import hashlib
import logging
import os
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from tempfile import NamedTemporaryFile

from dnfctl.core.store import serialize_names
from dnfctl.models.lockfile import Checksums, LockArtifact, SystemMetadata
from dnfctl.models.package import FIELD_SEPARATOR, PackageRecord, RepositoryEntry

logger = logging.getLogger(__name__)

TITLE = "# Fedora Package Lock File"
RECORD_FORMAT = "package|version|release|arch|size|install_time|repository"

SECTION_MANUAL = "MANUAL_PACKAGES"
SECTION_AUTO = "AUTO_DEPENDENCIES"
SECTION_REPOSITORIES = "REPOSITORIES"
SECTION_CHECKSUMS = "CHECKSUMS"
SECTION_ORDER: tuple[str, ...] = (
    SECTION_MANUAL,
    SECTION_AUTO,
    SECTION_REPOSITORIES,
    SECTION_CHECKSUMS,
)

CHECKSUM_MANUAL_KEY = "manual_packages"
CHECKSUM_AUTO_KEY = "auto_dependencies"

# Header comment key -> SystemMetadata field
_HEADER_KEYS = {
    "Generated": "generated_at",
    "System": "os_release",
    "Kernel": "kernel",
    "Architecture": "architecture",
    "Parallel Jobs": "parallel_jobs",
}


class LockfileError(Exception):
    """Base exception for lock file errors."""


class LockfileNotFoundError(LockfileError):
    """Raised when the lock file does not exist."""


class LockfileParseError(LockfileError):
    """Raised when lock file content is malformed."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


def checksum_names(names: Iterable[str]) -> str:
    """Compute the SHA-256 of a name list as stored on disk.

    The digest matches ``sha256sum`` of the newline-terminated list file.

    Args:
        names: Sorted package names.

    Returns:
        64-character hex digest.
    """
    content = serialize_names(tuple(names))
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def build_lock(
    manual_records: Sequence[PackageRecord],
    auto_records: Sequence[PackageRecord],
    repositories: Sequence[RepositoryEntry],
    *,
    manual_names: Sequence[str],
    auto_names: Sequence[str],
    system: SystemMetadata,
    generated_at: datetime | None = None,
) -> LockArtifact:
    """Assemble a lock artifact from enriched records.

    Checksums are taken over the classification input lists, not the
    enriched records, so they only vouch for the classification.

    Args:
        manual_records: Enriched manual packages.
        auto_records: Enriched auto dependencies.
        repositories: Enabled repositories.
        manual_names: Manual name list the records were enriched from.
        auto_names: Auto name list the records were enriched from.
        system: Metadata of the current system.
        generated_at: Timestamp. Defaults to now (UTC), truncated to seconds.

    Returns:
        New LockArtifact.
    """
    timestamp = generated_at or datetime.now(UTC).replace(microsecond=0)
    return LockArtifact(
        generated_at=timestamp,
        system=system,
        manual=tuple(manual_records),
        auto=tuple(auto_records),
        repositories=tuple(repositories),
        checksums=Checksums(
            manual=checksum_names(manual_names),
            auto=checksum_names(auto_names),
        ),
    )


def _format_record(record: PackageRecord) -> str:
    return FIELD_SEPARATOR.join(
        [
            record.name,
            record.version,
            record.release,
            record.arch,
            str(record.size_bytes),
            str(record.install_time),
            record.repository,
        ]
    )


def serialize_lock(artifact: LockArtifact) -> str:
    """Render a lock artifact as lock file text.

    Args:
        artifact: The artifact to render.

    Returns:
        Lock file content, newline-terminated.
    """
    system = artifact.system
    lines: list[str] = [
        TITLE,
        f"# Generated: {artifact.generated_at.isoformat()}",
        f"# System: {system.os_release}",
        f"# Kernel: {system.kernel}",
        f"# Architecture: {system.architecture}",
        f"# Parallel Jobs: {system.parallel_jobs}",
        "",
        f"# Format: {RECORD_FORMAT}",
        "",
        f"[{SECTION_MANUAL}]",
        *(_format_record(r) for r in artifact.manual),
        "",
        f"[{SECTION_AUTO}]",
        *(_format_record(r) for r in artifact.auto),
        "",
        f"[{SECTION_REPOSITORIES}]",
        *(f"{r.name}{FIELD_SEPARATOR}{r.state}" for r in artifact.repositories),
        "",
        f"[{SECTION_CHECKSUMS}]",
        f"{CHECKSUM_MANUAL_KEY}{FIELD_SEPARATOR}{artifact.checksums.manual}",
        f"{CHECKSUM_AUTO_KEY}{FIELD_SEPARATOR}{artifact.checksums.auto}",
    ]
    return "\n".join(lines) + "\n"


def _section_header(line: str) -> str | None:
    """Return the section name if the line is a ``[SECTION]`` header."""
    if line.startswith("[") and line.endswith("]") and len(line) > 2:
        return line[1:-1]
    return None


def split_sections(text: str) -> tuple[dict[str, str], dict[str, list[tuple[int, str]]]]:
    """Split lock file text into header values and section bodies.

    Args:
        text: Lock file content.

    Returns:
        Tuple of (header key -> value, section name -> [(line number, line)]).
        Blank lines and comments are dropped from section bodies.

    Raises:
        LockfileParseError: If sections are unknown, duplicated or out of order.
    """
    header: dict[str, str] = {}
    sections: dict[str, list[tuple[int, str]]] = {}
    current: str | None = None
    last_position = -1

    for line_number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        if line.startswith("#"):
            if current is None:
                key, sep, value = line.lstrip("#").strip().partition(": ")
                if sep and key in _HEADER_KEYS:
                    header[key] = value.strip()
            continue

        name = _section_header(line)
        if name is not None:
            if name not in SECTION_ORDER:
                raise LockfileParseError(f"unknown section [{name}]", line_number)
            if name in sections:
                raise LockfileParseError(f"duplicate section [{name}]", line_number)
            position = SECTION_ORDER.index(name)
            if position < last_position:
                raise LockfileParseError(
                    f"section [{name}] must come before [{SECTION_ORDER[last_position]}]",
                    line_number,
                )
            last_position = position
            current = name
            sections[name] = []
            continue

        if current is None:
            raise LockfileParseError(f"record outside of any section: {line[:60]!r}", line_number)
        sections[current].append((line_number, line))

    return header, sections


def _parse_record(line: str, line_number: int) -> PackageRecord:
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) != 7:
        raise LockfileParseError(
            f"expected 7 fields ({RECORD_FORMAT}), got {len(parts)}",
            line_number,
        )
    name, version, release, arch, size, install_time, repository = parts
    if not size.isdigit() or not install_time.isdigit():
        raise LockfileParseError(f"size and install time must be integers: {line!r}", line_number)
    try:
        return PackageRecord(
            name=name,
            version=version,
            release=release,
            arch=arch,
            size_bytes=int(size),
            install_time=int(install_time),
            repository=repository,
        )
    except ValueError as e:
        raise LockfileParseError(str(e), line_number) from e


def _parse_repository(line: str, line_number: int) -> RepositoryEntry:
    name, sep, state = line.partition(FIELD_SEPARATOR)
    if not sep or state not in ("enabled", "disabled") or not name:
        raise LockfileParseError(f"invalid repository entry: {line!r}", line_number)
    return RepositoryEntry(name=name, enabled=state == "enabled")


def _parse_checksums(body: list[tuple[int, str]]) -> Checksums:
    values: dict[str, str] = {}
    for line_number, line in body:
        key, sep, digest = line.partition(FIELD_SEPARATOR)
        if not sep or key not in (CHECKSUM_MANUAL_KEY, CHECKSUM_AUTO_KEY):
            raise LockfileParseError(f"invalid checksum entry: {line!r}", line_number)
        values[key] = digest
    return Checksums(
        manual=values.get(CHECKSUM_MANUAL_KEY, ""),
        auto=values.get(CHECKSUM_AUTO_KEY, ""),
    )


def _parse_system(header: dict[str, str]) -> tuple[datetime, SystemMetadata]:
    raw_generated = header.get("Generated")
    if raw_generated is None:
        raise LockfileParseError("missing '# Generated:' header")
    try:
        generated_at = datetime.fromisoformat(raw_generated)
    except ValueError as e:
        raise LockfileParseError(f"invalid Generated timestamp {raw_generated!r}") from e

    jobs = header.get("Parallel Jobs", "1")
    if not jobs.isdigit():
        raise LockfileParseError(f"invalid Parallel Jobs value {jobs!r}")

    system = SystemMetadata(
        os_release=header.get("System", "Unknown"),
        kernel=header.get("Kernel", "Unknown"),
        architecture=header.get("Architecture", "Unknown"),
        parallel_jobs=int(jobs),
    )
    return generated_at, system


def parse_lock(text: str) -> LockArtifact:
    """Parse lock file text into a LockArtifact.

    Missing sections parse as empty.

    Args:
        text: Lock file content.

    Returns:
        Parsed LockArtifact.

    Raises:
        LockfileParseError: If the content is malformed.
    """
    header, sections = split_sections(text)
    generated_at, system = _parse_system(header)

    return LockArtifact(
        generated_at=generated_at,
        system=system,
        manual=tuple(_parse_record(line, n) for n, line in sections.get(SECTION_MANUAL, [])),
        auto=tuple(_parse_record(line, n) for n, line in sections.get(SECTION_AUTO, [])),
        repositories=tuple(
            _parse_repository(line, n) for n, line in sections.get(SECTION_REPOSITORIES, [])
        ),
        checksums=_parse_checksums(sections.get(SECTION_CHECKSUMS, [])),
    )


def load_lock(path: Path) -> LockArtifact:
    """Read and parse a lock file.

    Args:
        path: Lock file path.

    Returns:
        Parsed LockArtifact.

    Raises:
        LockfileNotFoundError: If the file doesn't exist.
        LockfileParseError: If the content is malformed.
        LockfileError: If the file cannot be read.
    """
    if not path.exists():
        raise LockfileNotFoundError(f"Lock file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LockfileError(f"Failed to read lock file: {e}") from e

    return parse_lock(text)


def save_lock(artifact: LockArtifact, path: Path) -> Path:
    """Write a lock file atomically.

    The content is written to a temporary file in the same directory
    and moved into place with os.replace().

    Args:
        artifact: The artifact to save.
        path: Destination path.

    Returns:
        Path where the lock file was saved.

    Raises:
        LockfileError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content = serialize_lock(artifact)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise LockfileError(f"Failed to write lock file: {e}") from e

    logger.debug("Saved lock file with %d records to %s", artifact.record_count, path)
    return path
