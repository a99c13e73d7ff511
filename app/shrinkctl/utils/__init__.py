"""Utility modules for shrinkctl.

This module exports commonly used utility functions.
"""

from shrinkctl.utils.formatting import (
    console,
    create_outcome_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from shrinkctl.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "create_outcome_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
