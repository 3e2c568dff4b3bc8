"""Path management for dnfctl.

Two kinds of locations are used:

- The package data directory (default ~/fedora-packages/) holding the
  captured name lists, the lock file and exported archives.
- XDG directories for user configuration (config.toml, theme.toml).

Package data layout:
- outputs/default-packages.txt
- outputs/manual-packages.txt
- outputs/auto-dependencies.txt
- outputs/dependency-tree.txt
- outputs/fedora.lock
"""

import os
from dataclasses import dataclass
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "dnfctl"

DEFAULT_PACKAGE_DIRNAME = "fedora-packages"
OUTPUTS_DIRNAME = "outputs"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/dnfctl/ (or XDG_CONFIG_HOME/dnfctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_settings_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/dnfctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_default_package_dir() -> Path:
    """Get the default package data directory.

    Returns:
        Path to ~/fedora-packages.
    """
    return Path.home() / DEFAULT_PACKAGE_DIRNAME


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


@dataclass(frozen=True, slots=True)
class PackagePaths:
    """Locations of all files kept in the package data directory.

    Attributes:
        package_dir: Root of the package data directory.
        cache_dir: Scratch directory for transient files.
    """

    package_dir: Path
    cache_dir: Path

    @property
    def outputs_dir(self) -> Path:
        """Directory holding name lists and the lock file."""
        return self.package_dir / OUTPUTS_DIRNAME

    @property
    def defaults(self) -> Path:
        """Default (base OS) package name list."""
        return self.outputs_dir / "default-packages.txt"

    @property
    def manual(self) -> Path:
        """Manually installed package name list."""
        return self.outputs_dir / "manual-packages.txt"

    @property
    def auto(self) -> Path:
        """Auto dependency name list."""
        return self.outputs_dir / "auto-dependencies.txt"

    @property
    def dependency_tree(self) -> Path:
        """Rendered dependency tree text file."""
        return self.outputs_dir / "dependency-tree.txt"

    @property
    def lock(self) -> Path:
        """Lock file path."""
        return self.outputs_dir / "fedora.lock"

    def ensure_dirs(self) -> None:
        """Create the package, outputs and cache directories.

        Raises:
            RuntimeError: If a directory cannot be created.
        """
        _ensure_dir(self.package_dir, "package data")
        _ensure_dir(self.outputs_dir, "outputs")
        _ensure_dir(self.cache_dir, "cache")
