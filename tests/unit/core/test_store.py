"""Unit tests for PackageStore."""

from pathlib import Path

import pytest
from dnfctl.core.classifier import classify
from dnfctl.core.paths import PackagePaths
from dnfctl.core.store import (
    DefaultsMissingError,
    PackageListMissingError,
    PackageStore,
    serialize_names,
)


@pytest.fixture
def store(package_env: PackagePaths) -> PackageStore:
    """Store over an empty package directory."""
    return PackageStore(package_env)


class TestSerializeNames:
    """Tests for serialize_names()."""

    def test_newline_terminated(self) -> None:
        """Each name ends with a newline."""
        assert serialize_names(("a", "b")) == "a\nb\n"

    def test_empty(self) -> None:
        """An empty list is an empty file."""
        assert serialize_names(()) == ""


class TestPackageStore:
    """Tests for reading and writing name lists."""

    def test_missing_defaults(self, store: PackageStore) -> None:
        """Loading absent defaults raises with an init hint."""
        assert not store.has_defaults()
        with pytest.raises(DefaultsMissingError) as exc_info:
            store.load_defaults()
        assert "dnfctl init" in exc_info.value.hint

    def test_missing_lists(self, store: PackageStore) -> None:
        """Loading absent lists raises with an analyze hint."""
        assert not store.has_lists()
        with pytest.raises(PackageListMissingError) as exc_info:
            store.load_manual()
        assert exc_info.value.hint == "Run 'dnfctl analyze' first."
        with pytest.raises(PackageListMissingError):
            store.load_auto()

    def test_defaults_round_trip(self, store: PackageStore) -> None:
        """Saved defaults load back unchanged."""
        store.save_defaults(("bash", "glibc"))
        assert store.load_defaults() == ("bash", "glibc")

    def test_defaults_backup(self, store: PackageStore, package_env: PackagePaths) -> None:
        """Replacing defaults with a stamp keeps a backup of the old list."""
        store.save_defaults(("bash",))
        store.save_defaults(("glibc",), stamp="20260101-000000")

        backup = package_env.outputs_dir / "default-packages.txt.backup-20260101-000000"
        assert backup.read_text() == "bash\n"
        assert store.load_defaults() == ("glibc",)

    def test_save_classification(self, store: PackageStore, package_env: PackagePaths) -> None:
        """Manual and auto lists are written and previous ones backed up."""
        store.save_classification(classify(("a", "b"), ("a",), ()))
        store.save_classification(classify(("a", "b", "c"), ("c",), ()), stamp="S")

        assert store.has_lists()
        assert store.load_manual() == ("c",)
        assert store.load_auto() == ("a", "b")
        assert (package_env.outputs_dir / "manual-packages-backup-S.txt").read_text() == "a\n"
        assert (package_env.outputs_dir / "auto-dependencies-backup-S.txt").read_text() == "b\n"

    def test_read_list_normalizes(self, tmp_path: Path) -> None:
        """Hand-edited lists are sorted and deduplicated on read."""
        path = tmp_path / "list.txt"
        path.write_text("vim\n\nbash\nvim\n")
        assert PackageStore.read_list(path) == ("bash", "vim")

    def test_write_list_creates_parents(self, tmp_path: Path) -> None:
        """Missing parent directories are created."""
        path = tmp_path / "deep" / "dir" / "list.txt"
        PackageStore.write_list(path, ("a",))
        assert path.read_text() == "a\n"
