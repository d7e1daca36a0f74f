"""
Status and show command handlers.
"""

import argparse

from teamtack.application.tasks import TaskWorkflow
from teamtack.core.domain.enums import LocalStatus
from teamtack.core.exceptions import ValidationError

from ..context import CommandContext
from ..display import print_task_detail, print_task_list
from ..exit_codes import ExitCode
from ..output import Console
from .work_on import task_workflow


__all__ = ["run_show", "run_status"]


def run_status(console: Console, ctx: CommandContext, args: argparse.Namespace) -> ExitCode:
    """
    Show or change a task's status.

    Without an id the first in-progress task is used.
    """
    workflow = task_workflow(ctx, writes=bool(args.set))

    if args.set:
        change = workflow.set_status(args.issue_id, args.set)
        console.success(
            f"{change.task.id}: {change.previous.value} -> {change.task.local_status.value}"
        )
        if change.remote is None:
            if change.remote_status:
                console.detail("Remote status unchanged (local status source)")
        elif change.remote.success:
            console.detail(f"Remote status: {change.remote_status}")
        else:
            console.warning(f"Remote status not updated: {change.remote.error}")
        return ExitCode.SUCCESS

    task, data = workflow.find(args.issue_id)
    if task is None:
        console.info("No task in progress")
        counts = [
            [status.value, str(len(data.tasks_with_status(status)))] for status in LocalStatus
        ]
        console.table(["Status", "Tasks"], counts)
        return ExitCode.SUCCESS

    print_task_detail(console, task)
    return ExitCode.SUCCESS


def run_show(console: Console, ctx: CommandContext, args: argparse.Namespace) -> ExitCode:
    """Show one task, from the cache or the tracker, or list the cache."""
    if args.remote:
        if not args.issue_id:
            raise ValidationError("--remote needs an issue id")
        workflow = TaskWorkflow(ctx.config, ctx.local, ctx.cycle_store, source=ctx.source())
        print_task_detail(console, workflow.fetch_remote(args.issue_id))
        return ExitCode.SUCCESS

    if args.issue_id:
        task, _ = task_workflow(ctx, writes=False).find(args.issue_id)
        print_task_detail(console, task)
        return ExitCode.SUCCESS

    data = ctx.cycle_store.require()
    console.header(f"{data.cycle_name} ({len(data.tasks)} tasks)")
    console.detail(f"Updated {data.updated_at}")
    print_task_list(console, data.tasks)
    return ExitCode.SUCCESS
