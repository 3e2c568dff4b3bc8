"""Runtime settings for dnfctl.

Settings are resolved in three layers, later layers winning:

1. Built-in defaults
2. Optional TOML file at ~/.config/dnfctl/config.toml
3. Environment variables:
   PACKAGE_DIR, MAX_PARALLEL_JOBS, CHUNK_SIZE, ENABLE_PROGRESS,
   CACHE_DIR, QUERY_TIMEOUT
"""

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dnfctl.core.paths import PackagePaths, get_default_package_dir, get_settings_path

logger = logging.getLogger(__name__)

# Environment variable -> settings field
ENV_KNOBS: dict[str, str] = {
    "PACKAGE_DIR": "package_dir",
    "MAX_PARALLEL_JOBS": "max_parallel_jobs",
    "CHUNK_SIZE": "chunk_size",
    "ENABLE_PROGRESS": "enable_progress",
    "CACHE_DIR": "cache_dir",
    "QUERY_TIMEOUT": "query_timeout",
}

DEFAULT_CHUNK_SIZE = 50
DEFAULT_QUERY_TIMEOUT = 60.0


def _default_parallel_jobs() -> int:
    """Return the host core count, falling back to 1."""
    return os.cpu_count() or 1


class SettingsError(Exception):
    """Raised when settings cannot be read or are invalid."""


class Settings(BaseModel):
    """Resolved runtime settings.

    Attributes:
        package_dir: Directory holding package lists, lock file and archives.
        max_parallel_jobs: Maximum number of chunks processed concurrently.
        chunk_size: Number of packages handled by one worker per chunk.
        enable_progress: Whether batch progress is rendered.
        cache_dir: Scratch directory. Defaults to <package_dir>/.cache.
        query_timeout: Seconds before a package query is abandoned, 0 disables.
    """

    model_config = ConfigDict(extra="forbid")

    package_dir: Annotated[
        Path,
        Field(default_factory=get_default_package_dir, description="Package data directory"),
    ]
    max_parallel_jobs: Annotated[
        int,
        Field(default_factory=_default_parallel_jobs, ge=1, le=256, description="Worker count"),
    ]
    chunk_size: Annotated[
        int,
        Field(ge=1, le=10000, description="Packages per chunk"),
    ] = DEFAULT_CHUNK_SIZE
    enable_progress: Annotated[
        bool,
        Field(description="Render batch progress"),
    ] = True
    cache_dir: Annotated[
        Path | None,
        Field(description="Scratch directory (None = <package_dir>/.cache)"),
    ] = None
    query_timeout: Annotated[
        float,
        Field(ge=0, description="Per-query timeout in seconds (0 = no timeout)"),
    ] = DEFAULT_QUERY_TIMEOUT

    @property
    def effective_cache_dir(self) -> Path:
        """Cache directory, defaulting to a hidden directory in package_dir."""
        if self.cache_dir is not None:
            return self.cache_dir
        return self.package_dir / ".cache"

    @property
    def effective_timeout(self) -> float | None:
        """Query timeout suitable for subprocess, None when disabled."""
        return self.query_timeout or None

    @property
    def paths(self) -> PackagePaths:
        """File locations derived from these settings."""
        return PackagePaths(
            package_dir=self.package_dir.expanduser(),
            cache_dir=self.effective_cache_dir.expanduser(),
        )


def _read_settings_file(path: Path) -> dict[str, Any]:
    """Read raw settings from a TOML file.

    Args:
        path: Path to the settings file.

    Returns:
        Dictionary of raw values, empty if the file doesn't exist.

    Raises:
        SettingsError: If the file cannot be read or parsed.
    """
    if not path.exists():
        return {}

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML syntax in {path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings {path}: {e}") from e

    logger.debug("Loaded settings file %s", path)
    return data


def _read_env(env: Mapping[str, str]) -> dict[str, str]:
    """Collect settings overrides from environment variables.

    Empty values are ignored so that `CHUNK_SIZE= dnfctl lock` keeps the default.

    Args:
        env: Environment mapping to read.

    Returns:
        Dictionary of field name to raw string value.
    """
    overrides: dict[str, str] = {}
    for var, field_name in ENV_KNOBS.items():
        value = env.get(var, "").strip()
        if value:
            overrides[field_name] = value
    return overrides


def load_settings(
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
) -> Settings:
    """Resolve settings from defaults, the settings file and the environment.

    Args:
        env: Environment mapping. If None, uses os.environ.
        path: Settings file path. If None, uses the default config path.

    Returns:
        Validated Settings object.

    Raises:
        SettingsError: If the file is unreadable or a value is invalid.
    """
    environ = os.environ if env is None else env
    data = _read_settings_file(path or get_settings_path())
    data.update(_read_env(environ))

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings: {e}") from e
