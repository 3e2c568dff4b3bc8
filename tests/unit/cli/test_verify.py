"""Unit tests for verify command."""

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
    """Lock with x-1.0-1 and y-1.0-1 as manual packages."""
    manual = [
        make_record("x", version="1.0", release="1"),
        make_record("y", version="1.0", release="1"),
    ]
    artifact = build_lock(
        manual, [], [], manual_names=["x", "y"], auto_names=[], system=SystemMetadata()
    )
    save_lock(artifact, package_env.lock)
    return package_env


class TestVerifyCommand:
    """Tests for dnfctl verify."""

    def test_requires_lock(self, package_env: PackagePaths) -> None:
        """Without a lock file the command exits 1 with a hint."""
        result = runner.invoke(app, ["verify"])

        assert result.exit_code == 1
        assert "Lock file not found" in result.output
        assert "Run 'dnfctl lock' first." in result.output

    def test_invalid_lock(self, package_env: PackagePaths) -> None:
        """A malformed lock is reported with its line number."""
        package_env.lock.write_text("# Generated: 2026-01-01T00:00:00\n[NOPE]\n")

        result = runner.invoke(app, ["verify"])

        assert result.exit_code == 1
        assert "line 2" in result.output

    def test_reports_drift(self, locked: PackagePaths, fake_adapter, make_record) -> None:
        """Mismatched, missing and new packages are listed."""
        adapter = fake_adapter(
            packages=[make_record("x", version="2.0", release="1"), make_record("z")],
            user_installed=["x", "z"],
        )

        with patch("dnfctl.cli.types.DnfQueryAdapter", return_value=adapter):
            result = runner.invoke(app, ["verify"])

        assert result.exit_code == 0, result.output
        assert "~ x: locked=1.0-1, current=2.0-1" in result.output
        assert "- y-1.0-1" in result.output
        assert "+ z" in result.output
        assert "Missing:     1" in result.output

    def test_strict_fails_on_drift(
        self, locked: PackagePaths, fake_adapter, make_record
    ) -> None:
        """--strict exits 1 when the system differs."""
        adapter = fake_adapter(packages=[make_record("x", version="1.0", release="1")])

        with patch("dnfctl.cli.types.DnfQueryAdapter", return_value=adapter):
            result = runner.invoke(app, ["verify", "--strict"])

        assert result.exit_code == 1

    def test_clean_system(self, locked: PackagePaths, fake_adapter, make_record) -> None:
        """A matching system reports success."""
        adapter = fake_adapter(
            packages=[
                make_record("x", version="1.0", release="1"),
                make_record("y", version="1.0", release="1"),
            ],
            user_installed=["x", "y"],
        )

        with patch("dnfctl.cli.types.DnfQueryAdapter", return_value=adapter):
            result = runner.invoke(app, ["verify", "--strict"])

        assert result.exit_code == 0, result.output
        assert "System matches lock file" in result.output

    def test_json(self, locked: PackagePaths, fake_adapter, make_record) -> None:
        """--json prints the report."""
        adapter = fake_adapter(packages=[make_record("x", version="2.0", release="1")])

        with patch("dnfctl.cli.types.DnfQueryAdapter", return_value=adapter):
            result = runner.invoke(app, ["verify", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["missing"] == ["y-1.0-1"]
        assert data["mismatches"] == [{"name": "x", "locked": "1.0-1", "current": "2.0-1"}]
        assert data["clean"] is False

    def test_integrity_warning(self, locked: PackagePaths, fake_adapter, make_record) -> None:
        """Lists edited since locking produce a checksum warning."""
        locked.manual.write_text("x\ny\nz\n")
        locked.auto.write_text("")
        adapter = fake_adapter(
            packages=[
                make_record("x", version="1.0", release="1"),
                make_record("y", version="1.0", release="1"),
            ],
            user_installed=["x", "y"],
        )

        with patch("dnfctl.cli.types.DnfQueryAdapter", return_value=adapter):
            result = runner.invoke(app, ["verify"])

        assert result.exit_code == 0, result.output
        assert "manual package list changed" in result.output
