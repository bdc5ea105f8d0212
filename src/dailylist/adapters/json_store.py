"""JSON file task store adapter."""

import json
import logging
from pathlib import Path

from dailylist.core.tasks import Task
from dailylist.ports.task_store import SortKey

from .memory_store import sort_tasks

logger = logging.getLogger(__name__)


class JsonTaskStore:
    """
    File-based task store.

    Implements TaskStore protocol. All records live in one JSON document,
    loaded on construction and rewritten on every save.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self._tasks: list[Task] = self._load()

    def _load(self) -> list[Task]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
            return [Task.from_dict(item) for item in data.get("tasks", [])]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Could not read task file {self.path}, starting empty: {e}")
            return []

    def insert(self, task: Task) -> None:
        self._tasks.append(task)

    def delete(self, task: Task) -> None:
        self._tasks = [t for t in self._tasks if t.id != task.id]

    def save(self) -> bool:
        """Write all records; returns False if the file cannot be written."""
        payload = json.dumps({"tasks": [t.to_dict() for t in self._tasks]}, indent=2)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.debug(f"Writing {self.path} failed: {e}")
            return False
        return True

    def query_all(self, sort_by: SortKey = SortKey.POSITION) -> list[Task]:
        return sort_tasks(self._tasks, sort_by)
