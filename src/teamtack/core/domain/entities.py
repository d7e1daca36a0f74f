"""
Domain entities - Task, CycleData and the records hanging off them.

These are plain dataclasses; the cache store persists them through
``to_dict``/``from_dict`` so that adding a field never breaks an older
cache file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .enums import LocalStatus, get_priority_sort_index


@dataclass
class Attachment:
    """A file attached to a task, optionally downloaded to the output dir."""

    id: str
    title: str
    url: str
    content_type: str | None = None
    local_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "title": self.title, "url": self.url}
        if self.content_type:
            data["content_type"] = self.content_type
        if self.local_path:
            data["local_path"] = self.local_path
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Attachment:
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            url=data.get("url", ""),
            content_type=data.get("content_type"),
            local_path=data.get("local_path"),
        )


@dataclass
class Comment:
    """A comment on a remote issue or card."""

    id: str
    body: str
    created_at: str
    user: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "body": self.body, "created_at": self.created_at}
        if self.user:
            data["user"] = self.user
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Comment:
        return cls(
            id=str(data["id"]),
            body=data.get("body", ""),
            created_at=str(data.get("created_at", "")),
            user=data.get("user"),
        )


@dataclass
class Task:
    """
    A cached work item.

    ``id`` is the display id (``MP-123`` or a Trello short link) and is
    unique within a cache file, as is ``source_id``. ``status`` is the literal
    remote status name last seen; ``local_status`` is owned by the user and
    only inferred by sync the first time a task is seen.
    """

    id: str
    title: str
    status: str
    local_status: LocalStatus = LocalStatus.PENDING
    source_id: str | None = None
    source: str | None = None
    description: str | None = None
    priority: int = 0
    labels: list[str] = field(default_factory=list)
    assignee: str | None = None
    parent_issue_id: str | None = None
    url: str | None = None
    branch_name: str | None = None
    attachments: list[Attachment] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "local_status": self.local_status.value,
            "priority": self.priority,
            "labels": list(self.labels),
        }
        optional = {
            "source_id": self.source_id,
            "source": self.source,
            "description": self.description,
            "assignee": self.assignee,
            "parent_issue_id": self.parent_issue_id,
            "url": self.url,
            "branch_name": self.branch_name,
        }
        data.update({key: value for key, value in optional.items() if value})
        if self.attachments:
            data["attachments"] = [a.to_dict() for a in self.attachments]
        if self.comments:
            data["comments"] = [c.to_dict() for c in self.comments]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            status=data.get("status", ""),
            local_status=LocalStatus.from_string(data.get("local_status", "pending")),
            source_id=data.get("source_id"),
            source=data.get("source"),
            description=data.get("description"),
            priority=int(data.get("priority") or 0),
            labels=list(data.get("labels") or []),
            assignee=data.get("assignee"),
            parent_issue_id=data.get("parent_issue_id"),
            url=data.get("url"),
            branch_name=data.get("branch_name"),
            attachments=[Attachment.from_dict(a) for a in data.get("attachments") or []],
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
        )


@dataclass
class CycleInfo:
    """Identity of a cycle (or board) as recorded in the config history."""

    id: str
    name: str
    start_date: str | None = None
    end_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.start_date:
            data["start_date"] = self.start_date
        if self.end_date:
            data["end_date"] = self.end_date
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CycleInfo:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
        )


@dataclass
class CycleData:
    """The cache snapshot: one grouping and its tasks, priority ordered."""

    cycle_id: str
    cycle_name: str
    updated_at: str
    tasks: list[Task] = field(default_factory=list)

    def find_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def tasks_with_status(self, status: LocalStatus) -> list[Task]:
        return [task for task in self.tasks if task.local_status is status]

    def upsert(self, task: Task, priority_order: list[str] | None = None) -> None:
        """
        Replace any entry with the same display id, then re-sort.

        This is the only way tasks are added to a snapshot, so a saved cache
        never holds two entries for one display id.
        """
        self.tasks = [existing for existing in self.tasks if existing.id != task.id]
        self.tasks.append(task)
        self.sort_tasks(priority_order)

    def sort_tasks(self, priority_order: list[str] | None = None) -> None:
        # sorted() is stable, so equal priorities keep their fetch order
        self.tasks = sorted(
            self.tasks, key=lambda t: get_priority_sort_index(t.priority, priority_order)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "cycle_id": self.cycle_id,
            "cycle_name": self.cycle_name,
            "updated_at": self.updated_at,
            "tasks": [task.to_dict() for task in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CycleData:
        return cls(
            cycle_id=str(data.get("cycle_id", "")),
            cycle_name=data.get("cycle_name", ""),
            updated_at=str(data.get("updated_at", "")),
            tasks=[Task.from_dict(t) for t in data.get("tasks") or []],
        )
