"""Utility modules for mcremote.

This module exports commonly used utility functions.
"""

from mcremote.utils.formatting import (
    console,
    create_settings_table,
    err_console,
    mask_secret,
    print_error,
    print_info,
    print_warning,
)
from mcremote.utils.shell import ProbeOutput, find_executable, probe

__all__ = [
    "ProbeOutput",
    "console",
    "create_settings_table",
    "err_console",
    "find_executable",
    "mask_secret",
    "print_error",
    "print_info",
    "print_warning",
    "probe",
]
