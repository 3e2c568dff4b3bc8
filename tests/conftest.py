"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

import pytest
from dnfctl.core.paths import PackagePaths
from dnfctl.core.sets import PackageSet, to_package_set
from dnfctl.models.package import PackageRecord, RepositoryEntry
from dnfctl.query.base import LookupFailure, QueryAdapter, QueryError


class FakeQueryAdapter(QueryAdapter):
    """In-memory query adapter.

    Attributes:
        packages: Installed packages by name.
        user_installed: Names reported as user-installed.
        repos: Repository per package name.
        groups: Members per comps group. Groups not listed fail.
        optional: Optional members per comps group.
        deps: Requirements per package name.
        failing: Names whose metadata lookup raises LookupFailure.
        delays: Seconds to sleep before answering a metadata lookup.
    """

    def __init__(
        self,
        packages: Iterable[PackageRecord] = (),
        user_installed: Iterable[str] = (),
        repos: dict[str, str] | None = None,
        groups: dict[str, list[str]] | None = None,
        optional: dict[str, list[str]] | None = None,
        deps: dict[str, list[str]] | None = None,
        failing: Iterable[str] = (),
        delays: dict[str, float] | None = None,
        repositories: Iterable[RepositoryEntry] = (),
    ) -> None:
        self.packages = {p.name: p for p in packages}
        self.user_installed = to_package_set(user_installed)
        self.repos = repos or {}
        self.groups = groups or {}
        self.optional = optional or {}
        self.deps = deps or {}
        self.failing = set(failing)
        self.delays = delays or {}
        self.repositories = list(repositories)
        self.metadata_calls: list[str] = []

    def is_available(self) -> bool:
        return True

    def list_installed(self) -> PackageSet:
        return to_package_set(self.packages)

    def list_user_installed(self) -> PackageSet:
        return self.user_installed

    def metadata(self, name: str) -> PackageRecord | None:
        self.metadata_calls.append(name)
        if name in self.delays:
            time.sleep(self.delays[name])
        if name in self.failing:
            raise LookupFailure(f"lookup of {name} timed out")
        return self.packages.get(name)

    def repository(self, name: str) -> str | None:
        return self.repos.get(name)

    def list_group_packages(self, group: str, *, include_optional: bool = False) -> PackageSet:
        if group not in self.groups:
            raise QueryError(f"group {group} not found")
        members = list(self.groups[group])
        if include_optional:
            members += self.optional.get(group, [])
        return to_package_set(members)

    def list_repositories(self) -> list[RepositoryEntry]:
        return list(self.repositories)

    def requires(self, name: str) -> list[str]:
        if name not in self.deps:
            raise LookupFailure(f"no requirements for {name}")
        return list(self.deps[name])


@pytest.fixture(autouse=True)
def reset_dnfctl_logger() -> Iterator[None]:
    """Undo handler and propagation changes made by CLI logging setup."""
    logger = logging.getLogger("dnfctl")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def fake_adapter() -> type[FakeQueryAdapter]:
    """Return the in-memory adapter class for building test adapters."""
    return FakeQueryAdapter


@pytest.fixture
def make_record() -> Callable[..., PackageRecord]:
    """Factory for package records with sensible defaults."""

    def _make(
        name: str,
        version: str = "1.0",
        release: str = "1.fc41",
        arch: str = "x86_64",
        size_bytes: int = 1024,
        install_time: int = 1700000000,
        repository: str = "fedora",
    ) -> PackageRecord:
        return PackageRecord(
            name=name,
            version=version,
            release=release,
            arch=arch,
            size_bytes=size_bytes,
            install_time=install_time,
            repository=repository,
        )

    return _make


@pytest.fixture
def package_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> PackagePaths:
    """Point dnfctl at a temporary package directory and config home.

    Progress output is disabled and the pool is kept small.
    """
    package_dir = tmp_path / "fedora-packages"
    monkeypatch.setenv("PACKAGE_DIR", str(package_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("ENABLE_PROGRESS", "false")
    monkeypatch.setenv("MAX_PARALLEL_JOBS", "2")
    monkeypatch.setenv("CHUNK_SIZE", "2")
    for var in ("CACHE_DIR", "QUERY_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    paths = PackagePaths(package_dir=package_dir, cache_dir=package_dir / ".cache")
    paths.ensure_dirs()
    return paths


@pytest.fixture
def sample_rpm_output() -> str:
    """Sample rpm -q --queryformat output."""
    return "neovim|0.10.2|1.fc41|x86_64|12345678|1700000000\n"


@pytest.fixture
def sample_group_info() -> str:
    """Sample dnf group info output."""
    return """Group: Core
 Description: Smallest possible installation
 Mandatory Packages:
   audit
   basesystem
   bash
 Default Packages:
   NetworkManager
   dnf-plugins-core
 Optional Packages:
   dracut-config-rescue
"""
