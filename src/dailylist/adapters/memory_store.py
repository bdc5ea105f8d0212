"""In-memory task store adapter."""

import logging

from dailylist.core.tasks import Task
from dailylist.ports.task_store import SortKey

logger = logging.getLogger(__name__)


def sort_tasks(tasks: list[Task], sort_by: SortKey) -> list[Task]:
    """Sort records the way every store adapter reports them."""
    if sort_by is SortKey.CREATED_AT:
        return sorted(tasks, key=lambda t: t.created_at)
    return sorted(tasks, key=lambda t: (t.position, t.created_at))


class InMemoryTaskStore:
    """
    List-backed task store.

    Implements TaskStore protocol. Set `fail_saves` to simulate a store
    that cannot persist.
    """

    def __init__(self, tasks: list[Task] | None = None, fail_saves: bool = False):
        self._tasks: list[Task] = list(tasks or [])
        self.fail_saves = fail_saves
        self.save_count = 0

    def insert(self, task: Task) -> None:
        self._tasks.append(task)

    def delete(self, task: Task) -> None:
        self._tasks = [t for t in self._tasks if t.id != task.id]

    def save(self) -> bool:
        self.save_count += 1
        if self.fail_saves:
            logger.debug("In-memory store configured to fail saves")
            return False
        return True

    def query_all(self, sort_by: SortKey = SortKey.POSITION) -> list[Task]:
        return sort_tasks(self._tasks, sort_by)
