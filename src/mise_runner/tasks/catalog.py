"""Task listing grouped by declaring source."""

from __future__ import annotations

from collections.abc import Iterable

from mise_runner.backend.base import TaskBackend
from mise_runner.tasks.models import UNKNOWN_SOURCE, Task, TaskGroup


class TaskCatalog:
    """Fetches the full task list and folds it into source groups."""

    def __init__(self, backend: TaskBackend) -> None:
        self.backend = backend

    async def list(self) -> list[TaskGroup]:
        tasks = await self.backend.list_tasks()
        return group_tasks_by_source(tasks)


def group_tasks_by_source(tasks: Iterable[Task]) -> list[TaskGroup]:
    """Group tasks by source in first-seen order, keeping duplicates."""

    grouped: dict[str, list[Task]] = {}
    for task in tasks:
        grouped.setdefault(task.source or UNKNOWN_SOURCE, []).append(task)
    return [TaskGroup(source=source, tasks=tuple(members)) for source, members in grouped.items()]
