"""
CLI Application - Main entry point for the ttt command.
"""

import argparse
import logging
import sys

from teamtack import __version__
from teamtack.core.exceptions import TeamTackError, ValidationError

from .commands import (
    run_config_filters,
    run_config_show,
    run_config_status,
    run_config_teams,
    run_done,
    run_init,
    run_show,
    run_status,
    run_sync,
    run_work_on,
)
from .context import CommandContext
from .exit_codes import ExitCode
from .logging import setup_logging
from .output import Console


logger = logging.getLogger("CLI")


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser with global options and one subcommand
        per workflow.
    """
    parser = argparse.ArgumentParser(
        prog="ttt",
        description="Sync Linear or Trello tasks into a local cache and complete them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ttt init --team Engineering --user alice
  ttt sync                      # pull the current cycle
  ttt sync ENG-42               # refresh a single issue
  ttt work-on next              # start the highest priority pending task
  ttt status --set +1           # move the current task one step forward
  ttt done -m "Fixed login"     # complete it and cascade to the parent
  ttt config teams --qa-pm-team qa:Testing
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "--dir",
        type=str,
        help="Config/cache directory (default: $TEAMTACK_DIR, $TOON_DIR or ./.ttt)",
    )
    parser.add_argument("--env-file", type=str, help="Path to a .env file with credentials")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log remote writes instead of sending them",
    )

    output_group = parser.add_argument_group("Output")
    output_group.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    output_group.add_argument(
        "--quiet", "-q", action="store_true", help="Only print errors"
    )
    output_group.add_argument("--no-color", action="store_true", help="Disable colored output")
    output_group.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log output format (default: text)",
    )
    output_group.add_argument("--log-file", type=str, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # sync
    sync_parser = subparsers.add_parser("sync", help="Pull tasks into the local cache")
    sync_parser.add_argument("issue_id", nargs="?", help="Sync a single issue")
    sync_parser.add_argument(
        "--all", action="store_true", help="Include every status, not just the sync statuses"
    )
    sync_parser.add_argument(
        "--update", action="store_true", help="Push local status changes before pulling"
    )
    sync_parser.add_argument(
        "--no-attachments", action="store_true", help="Skip attachment downloads"
    )
    sync_parser.set_defaults(handler=run_sync)

    # done
    done_parser = subparsers.add_parser("done", help="Complete a task")
    done_parser.add_argument("issue_id", nargs="?", help="Task to complete (default: current)")
    done_parser.add_argument("-m", "--message", help="Completion comment to post")
    done_parser.add_argument(
        "--from-remote",
        action="store_true",
        help="Complete an issue that is not in the local cache",
    )
    done_parser.set_defaults(handler=run_done)

    # work-on
    work_parser = subparsers.add_parser("work-on", help="Start work on a task")
    work_parser.add_argument("issue_id", nargs="?", help="Task id or 'next'")
    work_parser.set_defaults(handler=run_work_on)

    # status
    status_parser = subparsers.add_parser("status", help="Show or change a task's status")
    status_parser.add_argument("issue_id", nargs="?", help="Task id (default: current)")
    status_parser.add_argument(
        "--set",
        metavar="VALUE",
        help="+1, -1, +2, -2, a local status or todo/in_progress/done/testing/blocked",
    )
    status_parser.set_defaults(handler=run_status)

    # show
    show_parser = subparsers.add_parser("show", help="Show cached tasks")
    show_parser.add_argument("issue_id", nargs="?", help="Task id (default: list all)")
    show_parser.add_argument(
        "--remote", action="store_true", help="Fetch the task from the tracker"
    )
    show_parser.set_defaults(handler=run_show)

    # config
    config_parser = subparsers.add_parser("config", help="Show or change configuration")
    config_sub = config_parser.add_subparsers(dest="config_command", metavar="SECTION")
    config_sub.required = True

    config_show = config_sub.add_parser("show", help="Print the configuration")
    config_show.set_defaults(handler=run_config_show)

    config_status = config_sub.add_parser("status", help="Status transitions")
    config_status.add_argument("--todo", nargs="+", metavar="NAME", help="Todo status(es)")
    config_status.add_argument("--in-progress", metavar="NAME", help="In progress status")
    config_status.add_argument("--done", metavar="NAME", help="Done status")
    config_status.add_argument("--testing", metavar="NAME", help="Testing status")
    config_status.add_argument("--blocked", metavar="NAME", help="Blocked status")
    config_status.set_defaults(handler=run_config_status)

    config_filters = config_sub.add_parser("filters", help="Label filters for sync")
    config_filters.add_argument("--label", action="append", help="Only sync these labels")
    config_filters.add_argument(
        "--exclude-label", action="append", help="Never sync these labels"
    )
    config_filters.add_argument("--clear", action="store_true", help="Remove all filters")
    config_filters.set_defaults(handler=run_config_filters)

    config_teams = config_sub.add_parser("teams", help="Teams and completion behavior")
    config_teams.add_argument("--team", metavar="KEY", help="Dev team key")
    config_teams.add_argument(
        "--qa-pm-team",
        action="append",
        metavar="KEY[:STATUS]",
        help="QA/PM team and its testing status (repeatable)",
    )
    config_teams.add_argument("--dev-testing-status", metavar="NAME")
    config_teams.add_argument(
        "--completion-mode",
        choices=["simple", "strict_review", "upstream_strict", "upstream_not_strict"],
    )
    config_teams.add_argument("--status-source", choices=["remote", "local"])
    config_teams.set_defaults(handler=run_config_teams)

    # init
    init_parser = subparsers.add_parser("init", help="Create the configuration")
    init_parser.add_argument(
        "--source", choices=["linear", "trello"], default="linear", help="Tracker type"
    )
    init_parser.add_argument("--team", help="Team (or board) name, key or id")
    init_parser.add_argument("--user", help="Your user key, email or id")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing config")
    init_parser.set_defaults(handler=run_init)

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the ttt CLI.

    Parses arguments, sets up logging and dispatches to the command handler.

    Returns:
        Exit code (0 for success, 1 for any failure).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "handler", None):
        parser.print_help()
        return ExitCode.ERROR

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logging(level=log_level, log_format=args.log_format, log_file=args.log_file)

    console = Console(color=not args.no_color, verbose=args.verbose, quiet=args.quiet)
    ctx = CommandContext.from_args(args)

    try:
        return args.handler(console, ctx, args)
    except ValidationError as e:
        console.error(str(e))
        console.detail(f"Usage: {parser.prog} {args.command} --help")
        return ExitCode.ERROR
    except TeamTackError as e:
        logger.debug("Command failed", exc_info=True)
        console.error(str(e))
        return ExitCode.ERROR
    except KeyboardInterrupt:
        console.error("Interrupted")
        return ExitCode.ERROR
    finally:
        ctx.close()


def run() -> None:
    """
    Entry point for the console script.

    Calls main() and exits with its return code.
    """
    sys.exit(main())


if __name__ == "__main__":
    run()
