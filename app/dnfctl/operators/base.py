"""Abstract base class for package installers.

This module defines the Installer interface used by restore.
"""

from abc import ABC, abstractmethod


class Installer(ABC):
    """Abstract base class for package installers.

    Installers hand exact package specs to the system package manager.
    Output and prompts go straight to the user's terminal.

    Attributes:
        dry_run: If True, only simulate the installation.

    Example:
        >>> installer = DnfInstaller(dry_run=True)
        >>> if installer.is_available():
        ...     status = installer.install(["htop-3.3.0-1.fc41.x86_64"])
    """

    def __init__(self, dry_run: bool = False) -> None:
        """Initialize the installer.

        Args:
            dry_run: If True, only simulate the installation.
        """
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Check if installer is in dry-run mode."""
        return self._dry_run

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the package manager is available on the system."""

    @abstractmethod
    def install(self, specs: list[str]) -> int:
        """Install packages by exact spec.

        Args:
            specs: Package specs (name-version-release.arch).

        Returns:
            Exit status of the package manager, 0 on success.

        Raises:
            RuntimeError: If the package manager is not available.
        """
