"""Recurring (daily) task rules - no I/O dependencies.

Daily tasks are templated by title: the latest instance of a title decides
whether it recurs (last write wins).
"""

from datetime import date, datetime

from .calendar import at_time_of_day
from .ordering import next_position, normalize
from .tasks import Task, tasks_for_day


def latest_by_title(all_tasks: list[Task]) -> dict[str, Task]:
    """The most recently created task for each title."""
    latest: dict[str, Task] = {}
    for task in all_tasks:
        current = latest.get(task.title)
        if current is None or task.created_at > current.created_at:
            latest[task.title] = task
    return latest


def daily_tasks_needing_creation(
    target_day: date | datetime,
    all_tasks: list[Task],
) -> list[Task]:
    """
    Templates whose recurring task is missing on `target_day`.

    A title qualifies when its latest instance is daily and no task with
    that title exists on the day, completed or not. Returned by time of day.
    Pure function - no I/O.
    """
    titles_on_day = {t.title for t in tasks_for_day(target_day, all_tasks)}
    templates = [
        t
        for title, t in latest_by_title(all_tasks).items()
        if t.is_daily and title not in titles_on_day
    ]
    return sorted(templates, key=lambda t: (t.created_at.time(), t.title))


def instantiate_daily(
    templates: list[Task],
    target_day: date | datetime,
    day_tasks: list[Task],
    completed_first: bool = False,
) -> list[Task]:
    """
    Clone templates onto `target_day`.

    Each clone keeps the template's title and time of day, starts incomplete,
    stays daily, and continues the day's position sequence.
    """
    position = next_position(day_tasks)
    created = []
    for template in templates:
        created.append(
            Task(
                title=template.title,
                created_at=at_time_of_day(target_day, template.created_at),
                is_completed=False,
                position=position,
                is_daily=True,
            )
        )
        position += 1

    if created:
        normalize([*day_tasks, *created], completed_first)
    return created


def clear_daily_flag(title: str, all_tasks: list[Task]) -> list[Task]:
    """
    Turn recurrence off for every task with this title.

    Returns the tasks that changed.
    """
    changed = [t for t in all_tasks if t.title == title and t.is_daily]
    for task in changed:
        task.is_daily = False
    return changed
