"""Unit tests for diff command."""

import json
from unittest.mock import patch

import pytest
from dnfctl.cli.main import app
from dnfctl.core.lockfile import build_lock, save_lock
from dnfctl.core.paths import PackagePaths
from dnfctl.models.lockfile import SystemMetadata
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def locked(package_env: PackagePaths, make_record) -> PackagePaths:
    """Lock with gcc, htop and vim as manual packages."""
    names = ["gcc", "htop", "vim"]
    artifact = build_lock(
        [make_record(n) for n in names],
        [],
        [],
        manual_names=names,
        auto_names=[],
        system=SystemMetadata(),
    )
    save_lock(artifact, package_env.lock)
    return package_env


class TestDiffCommand:
    """Tests for dnfctl diff."""

    def test_requires_lock(self, package_env: PackagePaths) -> None:
        """Without a lock file the command exits 1 with a hint."""
        result = runner.invoke(app, ["diff"])

        assert result.exit_code == 1
        assert "Run 'dnfctl lock' first." in result.output

    def test_lists_and_summary(self, locked: PackagePaths, fake_adapter) -> None:
        """Both difference lists and the summary are shown."""
        adapter = fake_adapter(user_installed=["htop", "podman", "vim"])

        with patch("dnfctl.cli.types.DnfQueryAdapter", return_value=adapter):
            result = runner.invoke(app, ["diff"])

        assert result.exit_code == 0, result.output
        assert "- gcc" in result.output
        assert "+ podman" in result.output
        assert "Common packages: 2" in result.output
        assert "Only in lock file: 1" in result.output
        assert "Only on current system: 1" in result.output

    def test_brief(self, locked: PackagePaths, fake_adapter) -> None:
        """--brief shows only the summary."""
        adapter = fake_adapter(user_installed=["htop", "podman", "vim"])

        with patch("dnfctl.cli.types.DnfQueryAdapter", return_value=adapter):
            result = runner.invoke(app, ["diff", "--brief"])

        assert result.exit_code == 0, result.output
        assert "- gcc" not in result.output
        assert "Common packages: 2" in result.output

    def test_in_sync(self, locked: PackagePaths, fake_adapter) -> None:
        """Identical sides are reported as in sync."""
        adapter = fake_adapter(user_installed=["gcc", "htop", "vim"])

        with patch("dnfctl.cli.types.DnfQueryAdapter", return_value=adapter):
            result = runner.invoke(app, ["diff"])

        assert result.exit_code == 0, result.output
        assert "in sync" in result.output

    def test_json(self, locked: PackagePaths, fake_adapter) -> None:
        """--json prints counts and lists."""
        adapter = fake_adapter(user_installed=["htop"])

        with patch("dnfctl.cli.types.DnfQueryAdapter", return_value=adapter):
            result = runner.invoke(app, ["diff", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["only_in_lock"] == ["gcc", "vim"]
        assert data["summary"]["common"] == 1
