"""
Task display helpers shared by the commands.
"""

from teamtack.core.domain.entities import Task
from teamtack.core.domain.enums import PRIORITY_NAMES, LocalStatus

from .output import Colors, Console, Symbols


STATUS_SYMBOLS = {
    LocalStatus.PENDING: (Symbols.PENDING, Colors.WHITE),
    LocalStatus.IN_PROGRESS: (Symbols.IN_PROGRESS, Colors.YELLOW),
    LocalStatus.IN_REVIEW: (Symbols.IN_REVIEW, Colors.MAGENTA),
    LocalStatus.COMPLETED: (Symbols.COMPLETED, Colors.GREEN),
    LocalStatus.BLOCKED: (Symbols.BLOCKED, Colors.RED),
}


def priority_label(priority: int) -> str:
    return PRIORITY_NAMES.get(priority, "none")


def task_line(console: Console, task: Task) -> str:
    """One-line summary: symbol, id, title, remote status."""
    symbol, color = STATUS_SYMBOLS[task.local_status]
    return (
        f"  {console.styled(symbol, color)} {console.styled(task.id, Colors.BOLD)} "
        f"{task.title} {console.styled(f'[{task.status}]', Colors.DIM)}"
    )


def print_task_list(console: Console, tasks: list[Task]) -> None:
    for task in tasks:
        console.print(task_line(console, task))


def print_task_detail(console: Console, task: Task) -> None:
    """Full task view used by ``show`` and ``status``."""
    console.section(f"{task.id}: {task.title}")
    console.field("Local status", task.local_status.value)
    console.field("Remote status", task.status)
    console.field("Priority", priority_label(task.priority))
    if task.assignee:
        console.field("Assignee", task.assignee)
    if task.labels:
        console.field("Labels", ", ".join(task.labels))
    if task.parent_issue_id:
        console.field("Parent", task.parent_issue_id)
    if task.branch_name:
        console.field("Branch", task.branch_name)
    if task.url:
        console.print(f"  {Symbols.LINK} {task.url}")

    if task.description:
        console.print()
        for line in task.description.splitlines():
            console.print(f"  {line}")

    if task.attachments:
        console.section("Attachments")
        for attachment in task.attachments:
            where = attachment.local_path or attachment.url
            console.item(f"{attachment.title}: {where}")

    if task.comments:
        console.section(f"Comments ({len(task.comments)})")
        for comment in task.comments:
            author = comment.user or "unknown"
            console.print(console.styled(f"  {author} at {comment.created_at}", Colors.DIM))
            for line in comment.body.splitlines():
                console.print(f"    {line}")
