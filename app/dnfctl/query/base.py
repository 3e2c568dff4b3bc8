"""Abstract base class for package database queries.

This module defines the QueryAdapter interface the classification,
enrichment and verification code depends on.
"""

from abc import ABC, abstractmethod

from dnfctl.core.sets import PackageSet
from dnfctl.models.package import PackageRecord, RepositoryEntry


class QueryError(RuntimeError):
    """Raised when a package database query cannot be completed."""


class LookupFailure(QueryError):
    """Raised when a single-package lookup fails.

    Batch operations absorb this per item instead of aborting.
    """


class QueryAdapter(ABC):
    """Abstract base class for package database adapters.

    Adapters answer questions about the installed system: which packages
    exist, which the user chose, and the exact metadata of one package.

    Example:
        >>> adapter = DnfQueryAdapter()
        >>> if adapter.is_available():
        ...     for name in adapter.list_user_installed():
        ...         print(name)
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the package tools are available on the system.

        Returns:
            True if queries can be run, False otherwise.
        """

    @abstractmethod
    def list_installed(self) -> PackageSet:
        """List the names of all installed packages.

        Returns:
            Sorted, duplicate-free package names.

        Raises:
            QueryError: If the query fails.
        """

    @abstractmethod
    def list_user_installed(self) -> PackageSet:
        """List the names of packages the user installed explicitly.

        Returns:
            Sorted, duplicate-free package names.

        Raises:
            QueryError: If the query fails.
        """

    @abstractmethod
    def metadata(self, name: str) -> PackageRecord | None:
        """Fetch exact metadata for one installed package.

        The returned record has an empty repository; use repository()
        to resolve it.

        Args:
            name: Package name.

        Returns:
            PackageRecord if installed, None if not installed.

        Raises:
            LookupFailure: If the lookup itself fails (timeout, missing tool).
        """

    @abstractmethod
    def repository(self, name: str) -> str | None:
        """Resolve the repository an installed package came from.

        Args:
            name: Package name.

        Returns:
            Repository identifier, or None if unknown.

        Raises:
            LookupFailure: If the lookup itself fails.
        """

    @abstractmethod
    def list_group_packages(self, group: str, *, include_optional: bool = False) -> PackageSet:
        """List the mandatory and default packages of a package group.

        Args:
            group: Group identifier (e.g., 'core').
            include_optional: Also list optional and conditional members.

        Returns:
            Sorted, duplicate-free package names.

        Raises:
            QueryError: If the group cannot be queried.
        """

    @abstractmethod
    def list_repositories(self) -> list[RepositoryEntry]:
        """List the enabled repositories.

        Returns:
            Repository entries in the order reported by the package manager.
        """

    @abstractmethod
    def requires(self, name: str) -> list[str]:
        """Resolve the packages an installed package depends on.

        Args:
            name: Package name.

        Returns:
            Names of the resolved dependencies.

        Raises:
            LookupFailure: If the lookup fails.
        """
