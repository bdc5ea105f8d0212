"""Functional core - pure business logic with no I/O."""

from .tasks import Task, DayGroup, parse_titles, tasks_for_day, group_history, edit_task
from .calendar import is_same_day, start_of_day, at_time_of_day, is_new_day
from .ordering import (
    visible_order,
    baseline_order,
    normalize,
    create_tasks,
    toggle_completion,
    move_tasks,
    remove_task,
    restore_task,
)
from .recurrence import daily_tasks_needing_creation, instantiate_daily, clear_daily_flag
from .undo import DeletedTask, UndoBuffer

__all__ = [
    # Tasks
    "Task",
    "DayGroup",
    "parse_titles",
    "tasks_for_day",
    "group_history",
    "edit_task",
    # Calendar
    "is_same_day",
    "start_of_day",
    "at_time_of_day",
    "is_new_day",
    # Ordering
    "visible_order",
    "baseline_order",
    "normalize",
    "create_tasks",
    "toggle_completion",
    "move_tasks",
    "remove_task",
    "restore_task",
    # Recurrence
    "daily_tasks_needing_creation",
    "instantiate_daily",
    "clear_daily_flag",
    # Undo
    "DeletedTask",
    "UndoBuffer",
]
