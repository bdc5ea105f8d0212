"""Task store interface."""

from enum import Enum
from typing import Protocol

from dailylist.core.tasks import Task


class SortKey(Enum):
    """Sort order for reading all records."""

    POSITION = "position"
    CREATED_AT = "created_at"


class TaskStore(Protocol):
    """Interface for persisting task records across all days."""

    def insert(self, task: Task) -> None:
        """Add a new record."""
        ...

    def delete(self, task: Task) -> None:
        """Remove a record."""
        ...

    def save(self) -> bool:
        """Flush pending changes. Returns False on failure."""
        ...

    def query_all(self, sort_by: SortKey = SortKey.POSITION) -> list[Task]:
        """All records, sorted ascending by `sort_by`."""
        ...
