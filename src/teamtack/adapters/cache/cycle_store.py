"""
Cycle store - persistence for the CycleData snapshot.

A missing file is not an error: ``load`` returns None and the first sync
creates it. Saves go through a temp file and rename so a crash never
leaves a half-written cache.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from teamtack.adapters.config.yaml_store import read_yaml, write_yaml
from teamtack.core.domain.entities import CycleData, Task
from teamtack.core.exceptions import ConfigurationError


logger = logging.getLogger("CycleStore")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class CycleStore:
    """Reads and writes the task snapshot file."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> CycleData | None:
        data = read_yaml(self.path)
        if data is None:
            return None
        try:
            return CycleData.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Corrupt task cache at {self.path}", cause=e) from e

    def require(self) -> CycleData:
        """Load the snapshot or explain how to create one."""
        data = self.load()
        if data is None:
            raise ConfigurationError(f"No task cache at {self.path}. Run 'ttt sync' first.")
        return data

    def save(self, data: CycleData) -> None:
        # Last line of defence against duplicate display ids
        seen: set[str] = set()
        unique: list[Task] = []
        for task in reversed(data.tasks):
            if task.id not in seen:
                seen.add(task.id)
                unique.append(task)
        unique.reverse()
        if len(unique) != len(data.tasks):
            logger.warning(f"Dropped {len(data.tasks) - len(unique)} duplicate task(s) on save")
            data.tasks = unique

        write_yaml(self.path, data.to_dict())
        logger.debug(f"Saved {len(data.tasks)} task(s) to {self.path}")

    def upsert_task(
        self,
        task: Task,
        priority_order: list[str] | None = None,
        cycle_id: str = "",
        cycle_name: str = "",
    ) -> CycleData:
        """
        Replace one task's entry, leaving every other entry untouched.

        Creates the snapshot when none exists yet, using the given grouping.
        """
        data = self.load() or CycleData(cycle_id=cycle_id, cycle_name=cycle_name, updated_at="")
        data.upsert(task, priority_order)
        data.updated_at = utc_timestamp()
        self.save(data)
        return data
