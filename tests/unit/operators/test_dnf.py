"""Unit tests for DnfInstaller."""

from unittest.mock import MagicMock, patch

import pytest
from dnfctl.operators.dnf import DnfInstaller

SPECS = ["htop-3.3.0-1.fc41.x86_64", "vim-9.1-1.fc41.x86_64"]


class TestDnfInstaller:
    """Tests for DnfInstaller."""

    def test_build_command(self) -> None:
        """A real install answers yes."""
        assert DnfInstaller().build_command(SPECS) == ["sudo", "dnf", "install", "-y", *SPECS]

    def test_build_command_dry_run(self) -> None:
        """A dry run lets dnf resolve and answer no."""
        assert DnfInstaller(dry_run=True).build_command(SPECS) == [
            "sudo",
            "dnf",
            "install",
            "--assumeno",
            *SPECS,
        ]

    @patch("dnfctl.operators.dnf.run_interactive", return_value=0)
    @patch("dnfctl.operators.dnf.command_exists", return_value=True)
    def test_install_runs_dnf(self, mock_exists: MagicMock, mock_run: MagicMock) -> None:
        """install() runs dnf interactively and returns its status."""
        assert DnfInstaller().install(SPECS) == 0
        mock_run.assert_called_once_with(["sudo", "dnf", "install", "-y", *SPECS])

    @patch("dnfctl.operators.dnf.run_interactive", return_value=1)
    @patch("dnfctl.operators.dnf.command_exists", return_value=True)
    def test_install_failure_status(self, mock_exists: MagicMock, mock_run: MagicMock) -> None:
        """A failing dnf status is passed through."""
        assert DnfInstaller().install(SPECS) == 1

    @patch("dnfctl.operators.dnf.run_interactive")
    @patch("dnfctl.operators.dnf.command_exists", return_value=True)
    def test_empty_specs(self, mock_exists: MagicMock, mock_run: MagicMock) -> None:
        """Nothing to install never starts dnf."""
        assert DnfInstaller().install([]) == 0
        mock_run.assert_not_called()

    @patch("dnfctl.operators.dnf.command_exists", return_value=False)
    def test_unavailable(self, mock_exists: MagicMock) -> None:
        """A missing dnf raises RuntimeError."""
        with pytest.raises(RuntimeError, match="not available"):
            DnfInstaller().install(SPECS)

    @patch("dnfctl.operators.dnf.run_interactive", side_effect=OSError("exec failed"))
    @patch("dnfctl.operators.dnf.command_exists", return_value=True)
    def test_os_error(self, mock_exists: MagicMock, mock_run: MagicMock) -> None:
        """Start failures become RuntimeError."""
        with pytest.raises(RuntimeError, match="exec failed"):
            DnfInstaller().install(SPECS)
