"""
work-on command handler.
"""

import argparse

from teamtack.application.tasks import TaskWorkflow
from teamtack.core.domain.enums import StatusSource

from ..context import CommandContext
from ..display import print_task_detail, print_task_list
from ..exit_codes import ExitCode
from ..output import Console


__all__ = ["run_work_on", "task_workflow"]


def task_workflow(ctx: CommandContext, writes: bool = True) -> TaskWorkflow:
    """TaskWorkflow with a remote source only when writes are mirrored remotely."""
    remote = writes and ctx.local.status_source is StatusSource.REMOTE
    return TaskWorkflow(
        ctx.config, ctx.local, ctx.cycle_store, source=ctx.source() if remote else None
    )


def run_work_on(console: Console, ctx: CommandContext, args: argparse.Namespace) -> ExitCode:
    """
    Start work on a task, or list the candidates.

    Args:
        console: Console for output.
        ctx: Command context.
        args: Parsed arguments (issue_id: id, "next" or None).

    Returns:
        Exit code.
    """
    result = task_workflow(ctx, writes=bool(args.issue_id)).start(args.issue_id)

    if result.action == "listed":
        if not result.candidates:
            console.info("No pending tasks assigned to you")
            return ExitCode.SUCCESS
        console.section(f"Pending tasks ({len(result.candidates)})")
        print_task_list(console, result.candidates)
        console.print()
        console.detail("Start one with: ttt work-on <id> (or 'next')")
        return ExitCode.SUCCESS

    task = result.task
    if result.action == "already_in_progress":
        console.warning(f"{task.id} is already in progress")
        return ExitCode.SUCCESS
    if result.action == "already_completed":
        console.info(f"{task.id} is already completed")
        return ExitCode.SUCCESS
    if result.action == "not_pending":
        console.info(
            f"{task.id} is {task.local_status.value}; "
            f"use 'ttt status {task.id} --set in-progress' to resume it"
        )
        print_task_detail(console, task)
        return ExitCode.SUCCESS

    console.success(f"Started {task.id}: {task.title}")
    if result.remote is not None and not result.remote.success:
        console.warning(f"Remote status not updated: {result.remote.error}")
    print_task_detail(console, task)
    return ExitCode.SUCCESS
