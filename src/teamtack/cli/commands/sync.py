"""
Sync command handler.
"""

import argparse

from teamtack.application.sync import SyncOptions

from ..context import CommandContext
from ..exit_codes import ExitCode
from ..output import Console


__all__ = ["run_sync"]


def run_sync(console: Console, ctx: CommandContext, args: argparse.Namespace) -> ExitCode:
    """
    Pull the current cycle (or one issue) into the local cache.

    Args:
        console: Console for output.
        ctx: Command context.
        args: Parsed arguments (issue_id, all, update, no_attachments).

    Returns:
        Exit code.
    """
    options = SyncOptions(
        issue_id=args.issue_id,
        sync_all=args.all,
        update=args.update,
        download_attachments=not getattr(args, "no_attachments", False),
    )

    target = options.issue_id or ("all statuses" if options.sync_all else "current cycle")
    console.header(f"Sync {ctx.config.source.type.value}: {target}")
    if ctx.dry_run:
        console.dry_run_banner()

    result = ctx.orchestrator().sync(options)
    console.sync_result(result)
    return ExitCode.SUCCESS if result.success else ExitCode.ERROR
