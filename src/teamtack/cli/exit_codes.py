"""
Exit codes for the ttt CLI.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """
    Process exit codes.

    No-ops (nothing to sync, task already completed) exit with SUCCESS.
    Any fatal error, whether configuration, remote or not-found, exits with ERROR.
    """

    SUCCESS = 0
    ERROR = 1
