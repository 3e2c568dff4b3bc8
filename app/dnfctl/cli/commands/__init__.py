"""CLI commands for dnfctl.

This package contains all subcommand implementations.
"""

from dnfctl.cli.commands import (
    analyze,
    diff,
    export,
    import_,
    init,
    lock,
    restore,
    stats,
    tree,
    verify,
)

__all__ = [
    "analyze",
    "diff",
    "export",
    "import_",
    "init",
    "lock",
    "restore",
    "stats",
    "tree",
    "verify",
]
