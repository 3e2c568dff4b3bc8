"""DNF/RPM query adapter implementation.

Lists packages with `dnf repoquery`, reads exact metadata with
`rpm -q --queryformat` and resolves groups and repositories with dnf.
"""

import logging
import subprocess

from dnfctl.core.sets import PackageSet, to_package_set
from dnfctl.models.package import PackageRecord, RepositoryEntry
from dnfctl.query.base import LookupFailure, QueryAdapter, QueryError
from dnfctl.utils.shell import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)

# Group info section headers whose members count as installed by default
_GROUP_MEMBER_SECTIONS = ("Mandatory Packages:", "Default Packages:")
_GROUP_EXTRA_SECTIONS = ("Optional Packages:", "Conditional Packages:")


class DnfQueryAdapter(QueryAdapter):
    """Query adapter backed by dnf and rpm.

    Attributes:
        timeout: Seconds before a single command is abandoned, None to wait.
    """

    # rpm query format: NAME|VERSION|RELEASE|ARCH|SIZE|INSTALLTIME
    _RPM_FORMAT = "%{NAME}|%{VERSION}|%{RELEASE}|%{ARCH}|%{SIZE}|%{INSTALLTIME}\\n"

    def __init__(self, timeout: float | None = 60.0) -> None:
        """Initialize the adapter.

        Args:
            timeout: Per-command timeout in seconds. None disables it.
        """
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check if dnf and rpm are available."""
        return command_exists("dnf") and command_exists("rpm")

    def list_installed(self) -> PackageSet:
        """List all installed package names."""
        result = self._query(
            ["dnf", "repoquery", "--installed", "--queryformat", "%{name}\\n"],
        )
        if not result.success:
            msg = f"dnf repoquery --installed failed: {result.stderr.strip() or 'unknown error'}"
            raise QueryError(msg)
        return to_package_set(result.lines)

    def list_user_installed(self) -> PackageSet:
        """List user-installed package names."""
        result = self._query(
            ["dnf", "repoquery", "--userinstalled", "--queryformat", "%{name}\\n"],
        )
        if not result.success:
            msg = (
                "dnf repoquery --userinstalled failed: "
                f"{result.stderr.strip() or 'unknown error'}"
            )
            raise QueryError(msg)
        return to_package_set(result.lines)

    def metadata(self, name: str) -> PackageRecord | None:
        """Read exact metadata for one installed package."""
        result = self._lookup(["rpm", "-q", "--queryformat", self._RPM_FORMAT, name])
        if not result.success:
            # rpm exits 1 with "package X is not installed"
            return None

        for line in result.lines:
            record = self._parse_rpm_line(line)
            if record is not None:
                return record

        logger.debug("No parseable rpm output for %s: %r", name, result.stdout[:100])
        return None

    def repository(self, name: str) -> str | None:
        """Resolve the repository an installed package came from."""
        result = self._lookup(
            ["dnf", "repoquery", "--installed", "--queryformat", "%{reponame}\\n", name],
        )
        if not result.success or not result.lines:
            return None
        return result.lines[0]

    def list_group_packages(self, group: str, *, include_optional: bool = False) -> PackageSet:
        """List the members of a package group."""
        result = self._query(["dnf", "group", "info", group])
        if not result.success:
            msg = f"dnf group info {group} failed: {result.stderr.strip() or 'unknown error'}"
            raise QueryError(msg)
        sections = _GROUP_MEMBER_SECTIONS
        if include_optional:
            sections += _GROUP_EXTRA_SECTIONS
        return to_package_set(self._parse_group_info(result.stdout, sections))

    def list_repositories(self) -> list[RepositoryEntry]:
        """List enabled repositories.

        A failed repolist is not fatal for locking, so it yields an
        empty list and a warning.
        """
        try:
            result = self._query(["dnf", "repolist", "enabled", "--quiet"])
        except QueryError as e:
            logger.warning("Could not list repositories: %s", e)
            return []

        if not result.success:
            logger.warning("dnf repolist failed: %s", result.stderr.strip() or "unknown error")
            return []

        entries: list[RepositoryEntry] = []
        # First line is the "repo id  repo name" header
        for line in result.lines[1:]:
            repo_id = line.split()[0]
            entries.append(RepositoryEntry(name=repo_id, enabled=True))
        return entries

    def requires(self, name: str) -> list[str]:
        """Resolve dependency package names of an installed package."""
        result = self._lookup(
            [
                "dnf",
                "repoquery",
                "--requires",
                "--resolve",
                "--queryformat",
                "%{name}\\n",
                name,
            ],
        )
        if not result.success:
            msg = f"dnf repoquery --requires failed for {name}: {result.stderr.strip()}"
            raise LookupFailure(msg)

        deps: list[str] = []
        for dep in result.lines:
            if dep not in deps:
                deps.append(dep)
        return deps

    def _query(self, args: list[str]) -> CommandResult:
        """Run a list query, converting transport failures to QueryError."""
        try:
            return run_command(args, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            msg = f"{' '.join(args[:3])} timed out after {self.timeout}s"
            raise QueryError(msg) from e
        except OSError as e:
            msg = f"Cannot run {args[0]}: {e}"
            raise QueryError(msg) from e

    def _lookup(self, args: list[str]) -> CommandResult:
        """Run a single-package lookup, converting failures to LookupFailure."""
        try:
            return run_command(args, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            msg = f"Lookup of {args[-1]} timed out after {self.timeout}s"
            raise LookupFailure(msg) from e
        except OSError as e:
            msg = f"Cannot run {args[0]}: {e}"
            raise LookupFailure(msg) from e

    def _parse_rpm_line(self, line: str) -> PackageRecord | None:
        """Parse one line of rpm query output.

        Args:
            line: Pipe-separated NAME|VERSION|RELEASE|ARCH|SIZE|INSTALLTIME.

        Returns:
            PackageRecord if parsing succeeds, None otherwise.
        """
        parts = line.split("|")
        if len(parts) != 6:
            logger.debug("Skipping malformed rpm line (parts=%d): %r", len(parts), line[:100])
            return None

        name, version, release, arch, size_str, time_str = (p.strip() for p in parts)
        if not name or not version:
            logger.debug("Skipping rpm line with empty name/version: %r", line[:100])
            return None

        return PackageRecord(
            name=name,
            version=version,
            release=release,
            arch=arch,
            size_bytes=int(size_str) if size_str.isdigit() else 0,
            install_time=int(time_str) if time_str.isdigit() else 0,
        )

    @staticmethod
    def _parse_group_info(
        output: str, sections: tuple[str, ...] = _GROUP_MEMBER_SECTIONS
    ) -> list[str]:
        """Extract package names from `dnf group info` output.

        Members are the indented lines below the given section headers,
        up to the next header.

        Args:
            output: Raw command output.
            sections: Section headers whose members are collected.

        Returns:
            Package names in output order.
        """
        names: list[str] = []
        collecting = False
        for raw in output.splitlines():
            if not raw.strip():
                continue
            if not raw.startswith(" "):
                collecting = raw.strip() in sections
                continue
            stripped = raw.strip()
            if stripped.endswith(":"):
                collecting = stripped in sections
                continue
            if collecting:
                names.append(stripped.split()[0])
        return names
