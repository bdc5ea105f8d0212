"""Ports - interfaces/protocols for external dependencies."""

from .task_store import SortKey, TaskStore
from .clock import Clock
from .timer import DeferredActions, ScheduledAction

__all__ = [
    "SortKey",
    "TaskStore",
    "Clock",
    "DeferredActions",
    "ScheduledAction",
]
