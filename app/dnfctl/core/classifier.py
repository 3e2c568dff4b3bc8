"""Package classification into defaults, manual and auto dependencies.

The three categories are derived by subtraction rather than by
independent queries, so they are disjoint by construction:

    manual = user_installed - defaults
    non_default = installed - defaults
    auto = non_default - manual
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dnfctl.core.sets import PackageSet, difference
from dnfctl.core.store import DefaultsMissingError

if TYPE_CHECKING:
    from dnfctl.query.base import QueryAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Classification:
    """Partition of the installed packages.

    Attributes:
        installed: Every installed package.
        defaults: Packages considered part of the base OS.
        manual: Packages the user chose that are not defaults.
        auto_dependencies: Remaining non-default packages.
    """

    installed: PackageSet
    defaults: PackageSet
    manual: PackageSet
    auto_dependencies: PackageSet

    @property
    def total(self) -> int:
        """Number of installed packages."""
        return len(self.installed)

    def share(self, count: int) -> float:
        """Percentage of the installed total represented by count."""
        if not self.installed:
            return 0.0
        return count * 100 / len(self.installed)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": {
                "total": self.total,
                "defaults": len(self.defaults),
                "manual": len(self.manual),
                "auto": len(self.auto_dependencies),
            },
            "manual": list(self.manual),
            "auto": list(self.auto_dependencies),
        }


def classify(
    installed_all: PackageSet,
    installed_by_user: PackageSet,
    defaults: PackageSet | None,
) -> Classification:
    """Partition installed packages into manual and auto dependencies.

    Args:
        installed_all: All installed package names.
        installed_by_user: Names the package manager reports as user-installed.
        defaults: Base OS package names captured by init.

    Returns:
        Classification with disjoint manual and auto sets.

    Raises:
        DefaultsMissingError: If defaults were never captured.
        UnsortedInputError: If any input is not a sorted package set.
    """
    if defaults is None:
        raise DefaultsMissingError()

    manual = difference(installed_by_user, defaults)
    non_default = difference(installed_all, defaults)
    auto = difference(non_default, manual)

    logger.debug(
        "Classified %d packages: %d manual, %d auto, %d defaults",
        len(installed_all),
        len(manual),
        len(auto),
        len(defaults),
    )
    return Classification(
        installed=installed_all,
        defaults=defaults,
        manual=manual,
        auto_dependencies=auto,
    )


def collect_installed_sets(adapter: QueryAdapter) -> tuple[PackageSet, PackageSet]:
    """Query all and user-installed packages side by side.

    Both queries run concurrently and both must finish before this
    returns.

    Args:
        adapter: Query adapter to use.

    Returns:
        Tuple of (installed_all, installed_by_user).

    Raises:
        QueryError: If either query fails.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="dnfctl-query") as executor:
        all_future = executor.submit(adapter.list_installed)
        user_future = executor.submit(adapter.list_user_installed)
        installed_all = all_future.result()
        installed_by_user = user_future.result()
    return installed_all, installed_by_user
