"""Utility modules for dnfctl.

This module exports commonly used utility functions.
"""

from dnfctl.utils.formatting import (
    console,
    create_record_table,
    err_console,
    print_error,
    print_info,
    print_list,
    print_success,
    print_warning,
)
from dnfctl.utils.shell import CommandResult, command_exists, run_command, run_interactive

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "create_record_table",
    "err_console",
    "print_error",
    "print_info",
    "print_list",
    "print_success",
    "print_warning",
    "run_command",
    "run_interactive",
]
