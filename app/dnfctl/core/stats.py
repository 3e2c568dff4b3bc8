"""Package distribution statistics."""

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from dnfctl.core.lockfile import SECTION_AUTO, SECTION_MANUAL, split_sections
from dnfctl.core.sets import PackageSet

# Category name -> name prefix pattern, matched against manual packages
CATEGORY_PATTERNS: dict[str, re.Pattern[str]] = {
    "Development": re.compile(
        r"^(gcc|clang|make|cmake|git|nodejs|npm|yarn|cargo|rustc|go|java|maven|gradle)"
    ),
    "Python": re.compile(r"^python"),
    "Containers": re.compile(r"^(docker|podman|buildah|skopeo|kubernetes|kubectl|helm)"),
    "Editors": re.compile(r"^(vim|emacs|neovim|code|atom|sublime)"),
    "Media": re.compile(r"^(vlc|mpv|ffmpeg|gimp|inkscape|blender|obs)"),
}


@dataclass(frozen=True, slots=True)
class PackageStatistics:
    """Counts of each package category.

    Attributes:
        manual: Number of manual packages.
        auto: Number of auto dependencies.
        defaults: Number of default packages.
        categories: Manual package count per category, in display order.
    """

    manual: int
    auto: int
    defaults: int
    categories: tuple[tuple[str, int], ...]

    @property
    def total(self) -> int:
        return self.manual + self.auto + self.defaults

    def share(self, count: int) -> float:
        """Percentage of the total represented by count."""
        if self.total == 0:
            return 0.0
        return count * 100 / self.total


@dataclass(frozen=True, slots=True)
class LockInfo:
    """Summary of a lock file on disk.

    Attributes:
        generated: Generated timestamp from the header, None if absent.
        size_bytes: File size.
        locked_packages: Number of package records.
    """

    generated: datetime | None
    size_bytes: int
    locked_packages: int


def categorize(names: PackageSet) -> tuple[tuple[str, int], ...]:
    """Count names matching each category pattern.

    A name may count towards several categories.
    """
    return tuple(
        (category, sum(1 for name in names if pattern.match(name)))
        for category, pattern in CATEGORY_PATTERNS.items()
    )


def compute_statistics(manual: PackageSet, auto: PackageSet, defaults: PackageSet) -> PackageStatistics:
    """Compute distribution and category counts.

    Args:
        manual: Manual package names.
        auto: Auto dependency names.
        defaults: Default package names, empty if never captured.

    Returns:
        PackageStatistics.
    """
    return PackageStatistics(
        manual=len(manual),
        auto=len(auto),
        defaults=len(defaults),
        categories=categorize(manual),
    )


def lock_info(path: Path) -> LockInfo | None:
    """Summarise a lock file without fully validating its records.

    Args:
        path: Lock file path.

    Returns:
        LockInfo, or None if the file doesn't exist.

    Raises:
        LockfileParseError: If the section layout is malformed.
    """
    if not path.exists():
        return None

    header, sections = split_sections(path.read_text(encoding="utf-8"))
    generated: datetime | None = None
    if "Generated" in header:
        try:
            generated = datetime.fromisoformat(header["Generated"])
        except ValueError:
            generated = None

    locked = sum(
        1
        for name in (SECTION_MANUAL, SECTION_AUTO)
        for _, line in sections.get(name, [])
        if "|" in line
    )
    return LockInfo(generated=generated, size_bytes=path.stat().st_size, locked_packages=locked)
