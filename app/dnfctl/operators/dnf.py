"""DNF installer implementation.

Installs exact package versions with `sudo dnf install`.
"""

import logging

from dnfctl.operators.base import Installer
from dnfctl.utils.shell import command_exists, run_interactive

logger = logging.getLogger(__name__)


class DnfInstaller(Installer):
    """Installer backed by dnf.

    Runs interactively so sudo prompts and dnf progress reach the user.
    In dry-run mode dnf resolves the transaction and answers no.
    """

    def is_available(self) -> bool:
        """Check if dnf is available."""
        return command_exists("dnf")

    def build_command(self, specs: list[str]) -> list[str]:
        """Return the dnf command line for installing specs."""
        args = ["sudo", "dnf", "install"]
        args.append("--assumeno" if self.dry_run else "-y")
        args.extend(specs)
        return args

    def install(self, specs: list[str]) -> int:
        """Install packages with dnf.

        Args:
            specs: Package specs (name-version-release.arch).

        Returns:
            dnf exit status. An empty spec list returns 0 without running dnf.

        Raises:
            RuntimeError: If dnf is not available or cannot be started.
        """
        if not self.is_available():
            msg = "DNF package manager is not available on this system"
            raise RuntimeError(msg)

        if not specs:
            return 0

        logger.info("Installing %d packages with dnf (dry_run=%s)", len(specs), self.dry_run)
        try:
            return run_interactive(self.build_command(specs))
        except OSError as e:
            msg = f"Failed to run dnf: {e}"
            raise RuntimeError(msg) from e
