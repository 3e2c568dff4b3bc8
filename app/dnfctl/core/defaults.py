"""Capture of the packages that ship with a base Fedora install.

The default set is the union of the mandatory and default members of
a few comps groups, every member of @core including optional ones, and
a fixed list of essential packages. It is
captured once, ideally on a fresh system, and used by analyze to tell
user choices apart from the base OS.
"""

import logging
from collections.abc import Iterable

from dnfctl.core.sets import PackageSet, to_package_set
from dnfctl.query.base import QueryAdapter, QueryError

logger = logging.getLogger(__name__)

DEFAULT_GROUPS: tuple[str, ...] = (
    "core",
    "base-x",
    "standard",
    "guest-desktop-agents",
    "hardware-support",
    "fonts",
)

# Groups whose optional members are defaults too
FULL_GROUPS: tuple[str, ...] = ("core",)

# Always treated as defaults, even if no group lists them
ESSENTIAL_PACKAGES: frozenset[str] = frozenset(
    {
        "kernel",
        "kernel-core",
        "kernel-modules",
        "glibc",
        "systemd",
        "fedora-release",
        "fedora-repos",
        "dnf",
        "rpm",
        "bash",
        "coreutils",
        "util-linux",
        "grep",
        "sed",
        "gawk",
        "findutils",
        "shadow-utils",
        "setup",
        "filesystem",
        "basesystem",
    }
)


def capture_defaults(
    adapter: QueryAdapter,
    groups: Iterable[str] = DEFAULT_GROUPS,
    full_groups: Iterable[str] = FULL_GROUPS,
) -> PackageSet:
    """Collect the default package set.

    A group that cannot be queried is logged and skipped.

    Args:
        adapter: Query adapter to use.
        groups: Comps groups whose mandatory and default packages count
            as defaults.
        full_groups: Comps groups whose optional packages count as well.

    Returns:
        Sorted, duplicate-free default package names.
    """
    names: set[str] = set(ESSENTIAL_PACKAGES)
    for group in groups:
        names.update(_group_members(adapter, group, include_optional=False))
    for group in full_groups:
        logger.debug("Adding all @%s group packages", group)
        names.update(_group_members(adapter, group, include_optional=True))
    return to_package_set(names)


def _group_members(adapter: QueryAdapter, group: str, *, include_optional: bool) -> PackageSet:
    try:
        members = adapter.list_group_packages(group, include_optional=include_optional)
    except QueryError as e:
        logger.warning("Skipping group %s: %s", group, e)
        return ()
    logger.debug("Group %s contributes %d packages", group, len(members))
    return members
