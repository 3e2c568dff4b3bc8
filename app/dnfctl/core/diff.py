"""Name-level comparison between a lock file and the running system."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from dnfctl.core.sets import PackageSet, difference, intersection, to_package_set


@dataclass(frozen=True, slots=True)
class LockDiff:
    """Manual package names compared between lock and system.

    Attributes:
        only_in_lock: Locked packages that are not installed (need install).
        only_on_system: Installed manual packages missing from the lock.
        common: Packages present in both.
    """

    only_in_lock: PackageSet = field(default=())
    only_on_system: PackageSet = field(default=())
    common: PackageSet = field(default=())

    @property
    def is_in_sync(self) -> bool:
        """True when both sides contain the same names."""
        return not self.only_in_lock and not self.only_on_system

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": {
                "common": len(self.common),
                "only_in_lock": len(self.only_in_lock),
                "only_on_system": len(self.only_on_system),
            },
            "only_in_lock": list(self.only_in_lock),
            "only_on_system": list(self.only_on_system),
        }


def diff_lock(locked_names: Iterable[str], current_manual: Iterable[str]) -> LockDiff:
    """Compare locked manual names with the user-installed names.

    Args:
        locked_names: Names from the lock's manual section, in any order.
        current_manual: Names the package manager reports as user-installed.

    Returns:
        LockDiff with sorted name sets.
    """
    locked = to_package_set(locked_names)
    current = to_package_set(current_manual)
    return LockDiff(
        only_in_lock=difference(locked, current),
        only_on_system=difference(current, locked),
        common=intersection(locked, current),
    )
