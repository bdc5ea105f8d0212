"""Pure task domain logic - no I/O dependencies."""

import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time

from .calendar import at_time_of_day, is_same_day, local_date

# Commas, semicolons and newlines all separate titles
TITLE_DELIMITERS = re.compile(r"[,;\n]")


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Task:
    """A single entry on a day's list."""

    title: str
    created_at: datetime
    is_completed: bool = False
    position: float = 0.0
    is_daily: bool = False
    id: str = field(default_factory=new_task_id)

    def __post_init__(self) -> None:
        self.title = self.title.strip()

    @property
    def day(self) -> date:
        """Calendar day this task belongs to."""
        return self.created_at.date()

    def format_time(self) -> str:
        """Time of day for display."""
        return self.created_at.strftime("%H:%M")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at.isoformat(),
            "is_completed": self.is_completed,
            "position": self.position,
            "is_daily": self.is_daily,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from its stored JSON form."""
        return cls(
            id=data["id"],
            title=data["title"],
            created_at=datetime.fromisoformat(data["created_at"]),
            is_completed=bool(data.get("is_completed", False)),
            position=float(data.get("position", 0.0)),
            is_daily=bool(data.get("is_daily", False)),
        )


@dataclass
class DayGroup:
    """All tasks created on one calendar day."""

    day: date
    tasks: list[Task]

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self.tasks if t.is_completed)


def parse_titles(raw: str) -> list[str]:
    """
    Split free-form input into task titles.

    Fragments are trimmed; empty ones (doubled or trailing delimiters) are dropped.
    Pure function - no I/O.
    """
    fragments = (part.strip() for part in TITLE_DELIMITERS.split(raw))
    return [f for f in fragments if f]


def tasks_for_day(day: date | datetime, tasks: list[Task]) -> list[Task]:
    """
    Filter to the tasks created on `day`, oldest first.

    Pure function - no I/O.
    """
    return sorted(
        (t for t in tasks if is_same_day(t.created_at, day)),
        key=lambda t: t.created_at,
    )


def group_history(
    tasks: list[Task],
    today: date | datetime | None = None,
    include_today: bool = False,
) -> list[DayGroup]:
    """
    Group tasks by calendar day, newest day first.

    Today is left out unless `include_today` is set (it has its own list).
    """
    today = local_date(today or date.today())
    by_day: dict[date, list[Task]] = {}
    for t in tasks:
        by_day.setdefault(t.day, []).append(t)

    groups = [
        DayGroup(day=d, tasks=sorted(day_tasks, key=lambda t: t.created_at))
        for d, day_tasks in by_day.items()
        if include_today or d != today
    ]
    return sorted(groups, key=lambda g: g.day, reverse=True)


def edit_task(
    task: Task,
    title: str | None = None,
    time_of_day: time | None = None,
    is_daily: bool | None = None,
) -> Task:
    """
    Apply an edit in place.

    A blank title is ignored. A new time of day keeps the date of `created_at`.
    Position and completion are left alone.
    """
    if title is not None and title.strip():
        task.title = title.strip()
    if time_of_day is not None:
        task.created_at = at_time_of_day(task.created_at, time_of_day)
    if is_daily is not None:
        task.is_daily = is_daily
    return task
