"""
Command handlers for the ttt CLI.

Each handler takes (console, ctx, args) and returns an ExitCode.
Fatal errors propagate as TeamTackError and are reported by main().
"""

from .config import run_config_filters, run_config_show, run_config_status, run_config_teams
from .done import run_done
from .init import run_init
from .status import run_show, run_status
from .sync import run_sync
from .work_on import run_work_on


__all__ = [
    "run_config_filters",
    "run_config_show",
    "run_config_status",
    "run_config_teams",
    "run_done",
    "run_init",
    "run_show",
    "run_status",
    "run_sync",
    "run_work_on",
]
