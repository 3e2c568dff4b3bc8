"""Storage of captured package name lists.

This module provides the PackageStore class for reading and writing
the default, manual and auto name lists kept in the outputs directory,
including timestamped backups of lists about to be replaced.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import TYPE_CHECKING

from dnfctl.core.sets import PackageSet, to_package_set

if TYPE_CHECKING:
    from dnfctl.core.classifier import Classification
    from dnfctl.core.paths import PackagePaths

logger = logging.getLogger(__name__)


class PreconditionMissingError(Exception):
    """Raised when a prerequisite step has not been run yet.

    Attributes:
        hint: Corrective action to show the user.
    """

    def __init__(self, message: str, hint: str) -> None:
        super().__init__(message)
        self.hint = hint


class DefaultsMissingError(PreconditionMissingError):
    """Raised when no default package list has been captured."""

    def __init__(self, message: str = "Default packages list not found") -> None:
        super().__init__(message, hint="Run 'dnfctl init' to capture the default packages.")


class PackageListMissingError(PreconditionMissingError):
    """Raised when the manual or auto package list has not been generated."""

    def __init__(self, message: str = "Package lists not found") -> None:
        super().__init__(message, hint="Run 'dnfctl analyze' first.")


def serialize_names(names: PackageSet) -> str:
    """Render a name list the way it is stored on disk.

    One name per line, each line newline-terminated.

    Args:
        names: Names to render.

    Returns:
        File content. Empty string for an empty list.
    """
    return "".join(f"{name}\n" for name in names)


class PackageStore:
    """Reads and writes package name lists in the outputs directory.

    Attributes:
        paths: File locations of the package data directory.
    """

    def __init__(self, paths: PackagePaths) -> None:
        """Initialize PackageStore.

        Args:
            paths: File locations of the package data directory.
        """
        self.paths = paths

    def has_defaults(self) -> bool:
        """Check if the default package list exists."""
        return self.paths.defaults.exists()

    def has_lists(self) -> bool:
        """Check if both manual and auto lists exist."""
        return self.paths.manual.exists() and self.paths.auto.exists()

    def load_defaults(self) -> PackageSet:
        """Load the default package list.

        Raises:
            DefaultsMissingError: If defaults were never captured.
        """
        if not self.has_defaults():
            raise DefaultsMissingError(f"Default packages list not found: {self.paths.defaults}")
        return self.read_list(self.paths.defaults)

    def load_manual(self) -> PackageSet:
        """Load the manual package list.

        Raises:
            PackageListMissingError: If analyze has not been run.
        """
        if not self.paths.manual.exists():
            raise PackageListMissingError(f"Manual packages list not found: {self.paths.manual}")
        return self.read_list(self.paths.manual)

    def load_auto(self) -> PackageSet:
        """Load the auto dependency list.

        Raises:
            PackageListMissingError: If analyze has not been run.
        """
        if not self.paths.auto.exists():
            raise PackageListMissingError(f"Auto dependency list not found: {self.paths.auto}")
        return self.read_list(self.paths.auto)

    def save_defaults(self, names: PackageSet, stamp: str | None = None) -> Path:
        """Write the default package list, backing up an existing one.

        Args:
            names: Default package names.
            stamp: Backup timestamp. No backup is made if None.

        Returns:
            Path of the written list.
        """
        if stamp is not None and self.has_defaults():
            backup = self.paths.defaults.with_name(f"{self.paths.defaults.name}.backup-{stamp}")
            self._copy(self.paths.defaults, backup)
        self.write_list(self.paths.defaults, names)
        return self.paths.defaults

    def save_classification(self, classification: Classification, stamp: str | None = None) -> None:
        """Write the manual and auto lists, backing up existing ones.

        Args:
            classification: Result of the classifier.
            stamp: Backup timestamp. No backup is made if None.
        """
        if stamp is not None:
            for path in (self.paths.manual, self.paths.auto):
                if path.exists():
                    self._copy(path, path.with_name(f"{path.stem}-backup-{stamp}{path.suffix}"))
        self.write_list(self.paths.manual, classification.manual)
        self.write_list(self.paths.auto, classification.auto_dependencies)

    @staticmethod
    def read_list(path: Path) -> PackageSet:
        """Read a name list file into a package set.

        Args:
            path: File to read.

        Returns:
            Sorted, duplicate-free names.
        """
        with path.open(encoding="utf-8") as f:
            return to_package_set(f)

    @staticmethod
    def write_list(path: Path, names: PackageSet) -> None:
        """Write a name list atomically.

        Args:
            path: Destination file.
            names: Names to write, already sorted.

        Raises:
            OSError: If the file cannot be written.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
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
                f.write(serialize_names(names))
            os.replace(str(tmp_path), str(path))
        except OSError:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise
        logger.debug("Wrote %d names to %s", len(names), path)

    @staticmethod
    def _copy(src: Path, dest: Path) -> None:
        shutil.copy2(src, dest)
        logger.info("Backed up %s to %s", src, dest)
