"""Unit tests for environment export and import."""

import tarfile
from datetime import UTC, datetime
from pathlib import Path

import pytest
from dnfctl.core.archive import (
    METADATA_NAME,
    ArchiveError,
    LockMissingError,
    archive_name,
    build_metadata,
    export_environment,
    import_environment,
)
from dnfctl.core.paths import PackagePaths
from dnfctl.models.lockfile import SystemMetadata

SYSTEM = SystemMetadata(
    os_release="Fedora release 41 (Forty One)",
    kernel="6.11.4",
    architecture="x86_64",
)


@pytest.fixture
def populated(package_env: PackagePaths) -> PackagePaths:
    """Package directory with lists and a lock file."""
    package_env.defaults.write_text("bash\nglibc\n")
    package_env.manual.write_text("htop\nvim\n")
    package_env.auto.write_text("libfoo\n")
    package_env.lock.write_text("# Fedora Package Lock File\n")
    return package_env


class TestExport:
    """Tests for export_environment()."""

    def test_archive_contents(self, populated: PackagePaths) -> None:
        """Lists, lock file and metadata are archived relative to the package dir."""
        path = export_environment(populated, SYSTEM, "workstation", "20260101-120000")

        assert path == populated.package_dir / "fedora-env-workstation-20260101-120000.tar.gz"
        with tarfile.open(path, "r:gz") as tar:
            names = set(tar.getnames())
        assert names == {
            "outputs/manual-packages.txt",
            "outputs/auto-dependencies.txt",
            "outputs/default-packages.txt",
            "outputs/fedora.lock",
            METADATA_NAME,
        }

    def test_requires_lock(self, package_env: PackagePaths) -> None:
        """Export without a lock file fails with a hint."""
        with pytest.raises(LockMissingError) as exc_info:
            export_environment(package_env, SYSTEM, "host", "stamp")
        assert exc_info.value.hint == "Run 'dnfctl lock' first."

    def test_missing_lists_are_skipped(self, package_env: PackagePaths) -> None:
        """Only existing files are archived."""
        package_env.lock.write_text("lock\n")

        path = export_environment(package_env, SYSTEM, "host", "stamp")

        with tarfile.open(path, "r:gz") as tar:
            assert set(tar.getnames()) == {"outputs/fedora.lock", METADATA_NAME}


class TestImport:
    """Tests for import_environment()."""

    def test_round_trip_into_new_directory(self, populated: PackagePaths, tmp_path: Path) -> None:
        """An exported archive restores the lists and reports metadata."""
        archive = export_environment(populated, SYSTEM, "laptop", "stamp")
        target = tmp_path / "restored"

        result = import_environment(archive, target, "20260102-000000")

        assert result.backup_dir is None
        assert (target / "outputs" / "manual-packages.txt").read_text() == "htop\nvim\n"
        assert not (target / METADATA_NAME).exists()
        assert result.metadata["export"]["hostname"] == "laptop"
        assert result.metadata["packages"] == {"manual": 2, "dependencies": 1}
        assert result.metadata["system"]["release"] == "Fedora release 41 (Forty One)"

    def test_existing_directory_is_backed_up(
        self, populated: PackagePaths, tmp_path: Path
    ) -> None:
        """The previous directory is moved aside, archive included."""
        archive = export_environment(populated, SYSTEM, "laptop", "stamp")
        populated.manual.write_text("changed\n")

        result = import_environment(archive, populated.package_dir, "20260102-000000")

        backup = populated.package_dir.with_name("fedora-packages.backup-20260102-000000")
        assert result.backup_dir == backup
        assert (backup / "outputs" / "manual-packages.txt").read_text() == "changed\n"
        assert populated.manual.read_text() == "htop\nvim\n"

    def test_missing_archive(self, tmp_path: Path) -> None:
        """A missing archive raises ArchiveError and touches nothing."""
        target = tmp_path / "pkgs"
        target.mkdir()

        with pytest.raises(ArchiveError, match="not found"):
            import_environment(tmp_path / "nope.tar.gz", target, "stamp")
        assert target.exists()

    def test_corrupt_archive(self, tmp_path: Path) -> None:
        """A file that is not a gzip tarball raises ArchiveError."""
        bogus = tmp_path / "bogus.tar.gz"
        bogus.write_bytes(b"not a tarball")

        with pytest.raises(ArchiveError, match="extract"):
            import_environment(bogus, tmp_path / "pkgs", "stamp")


class TestMetadata:
    """Tests for archive naming and metadata."""

    def test_archive_name(self) -> None:
        """Names follow fedora-env-<host>-<stamp>.tar.gz."""
        assert archive_name("box", "20260101-000000") == "fedora-env-box-20260101-000000.tar.gz"

    def test_build_metadata(self) -> None:
        """Metadata groups export, system and package counts."""
        when = datetime(2026, 1, 1, tzinfo=UTC)
        data = build_metadata(SYSTEM, "box", 3, 7, exported_at=when)

        assert data["export"] == {"date": when, "hostname": "box"}
        assert data["system"]["kernel"] == "6.11.4"
        assert data["packages"] == {"manual": 3, "dependencies": 7}
