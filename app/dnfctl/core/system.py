"""Host system information recorded in lock files and archives."""

import logging
import platform
import socket
from pathlib import Path

from dnfctl.models.lockfile import SystemMetadata

logger = logging.getLogger(__name__)

RELEASE_FILE = Path("/etc/fedora-release")


def read_os_release(path: Path = RELEASE_FILE) -> str:
    """Return the first line of the release file, or 'Unknown'."""
    try:
        content = path.read_text(encoding="utf-8").strip()
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return "Unknown"
    return content.splitlines()[0] if content else "Unknown"


def collect_system_metadata(parallel_jobs: int, release_file: Path = RELEASE_FILE) -> SystemMetadata:
    """Describe the running system.

    Args:
        parallel_jobs: Worker count used for the operation.
        release_file: OS release file to read.

    Returns:
        SystemMetadata for the current host.
    """
    return SystemMetadata(
        os_release=read_os_release(release_file),
        kernel=platform.release() or "Unknown",
        architecture=platform.machine() or "Unknown",
        parallel_jobs=parallel_jobs,
    )


def get_hostname() -> str:
    """Return the short host name."""
    return socket.gethostname()
