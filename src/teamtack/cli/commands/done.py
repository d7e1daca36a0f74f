"""
Done command handler.
"""

import argparse

from teamtack.adapters.git import GitCliMetadataProvider, format_commit_link
from teamtack.application.completion import DoneOptions, DoneWorkflow

from ..context import CommandContext
from ..exit_codes import ExitCode
from ..output import Console


__all__ = ["run_done"]


def run_done(console: Console, ctx: CommandContext, args: argparse.Namespace) -> ExitCode:
    """
    Complete a task and cascade the configured status changes.

    Args:
        console: Console for output.
        ctx: Command context.
        args: Parsed arguments (issue_id, message, from_remote).

    Returns:
        Exit code.
    """
    workflow = DoneWorkflow(
        ctx.source(),
        ctx.config,
        ctx.local,
        ctx.cycle_store,
        ctx.orchestrator(),
        git=GitCliMetadataProvider(),
    )
    result = workflow.run(
        DoneOptions(issue_id=args.issue_id, message=args.message, from_remote=args.from_remote)
    )

    if result.task is None:
        console.info("No task in progress. Nothing to complete.")
        return ExitCode.SUCCESS

    task = result.task
    console.header(f"Done: {task.id} {task.title}")

    if result.commit:
        console.detail(f"Commit {format_commit_link(result.commit)}: {result.commit.message}")

    outcome = result.outcome
    if outcome is None:
        console.info("Status source is local; the tracker was not updated")
    else:
        console.info(f"Completion mode: {outcome.mode.value}")
        for attempt in outcome.attempts:
            label = f"{attempt.target} {attempt.issue_key} -> {attempt.status}"
            if attempt.error:
                label += f" ({attempt.error})"
            console.item(label, "ok" if attempt.success else "fail")
        if outcome.comment_posted is True:
            console.success("Completion comment posted")
        elif outcome.comment_posted is False:
            console.warning("Completion comment could not be posted")

    for warning in result.warnings:
        console.warning(warning)

    console.success(f"{task.id} is now {task.local_status.value}")
    return ExitCode.SUCCESS
