"""Shared workflow layer between the CLI commands and the interactive shell.

DailySession wires the functional core to a task store and a clock. Every
structural mutation is followed by a save; a failed save is logged and
otherwise ignored, so in-memory and stored state may diverge until the next
successful save.
"""

import logging
from collections.abc import Collection
from datetime import date, datetime, time

from .adapters.file_state import FileSessionState, SessionState
from .adapters.json_store import JsonTaskStore
from .adapters.system_clock import SystemClock
from .config import Config
from .core import ordering
from .core.calendar import at_time_of_day, is_new_day, is_same_day
from .core.recurrence import clear_daily_flag, daily_tasks_needing_creation, instantiate_daily
from .core.tasks import DayGroup, Task, edit_task, group_history, parse_titles, tasks_for_day
from .core.undo import DeletedTask, UndoBuffer
from .ports.clock import Clock
from .ports.task_store import SortKey, TaskStore
from .ports.timer import DeferredActions

logger = logging.getLogger(__name__)


class DailySession:
    """Application service behind every presentation surface."""

    def __init__(
        self,
        store: TaskStore,
        clock: Clock,
        undo: UndoBuffer | None = None,
        completed_first: bool = False,
    ):
        self.store = store
        self.clock = clock
        self.undo = undo or UndoBuffer()
        self.completed_first = completed_first
        self.displayed_day: date | None = None

    # ============== Reads ==============

    @property
    def today(self) -> date:
        """The day currently on screen (the clock's day before first refresh)."""
        return self.displayed_day or self.clock.now().date()

    def get(self, task_id: str) -> Task | None:
        for task in self.store.query_all():
            if task.id == task_id:
                return task
        return None

    def day_tasks(self, day: date | datetime | None = None) -> list[Task]:
        """All tasks of a day, oldest first."""
        return tasks_for_day(day or self.today, self.store.query_all())

    def visible(self, day: date | datetime | None = None) -> list[Task]:
        """The day's tasks in visible order."""
        return ordering.visible_order(self.day_tasks(day), self.completed_first)

    def history(self, include_today: bool = False) -> list[DayGroup]:
        """Past days, newest first."""
        return group_history(
            self.store.query_all(SortKey.CREATED_AT),
            today=self.clock.now(),
            include_today=include_today,
        )

    # ============== Day transitions ==============

    def refresh_day(self) -> list[Task]:
        """
        Detect a day rollover and create the new day's recurring tasks.

        Returns the tasks created (empty when the day is unchanged).
        """
        now = self.clock.now()
        if not is_new_day(self.displayed_day, now):
            return []
        if self.displayed_day is not None:
            logger.info(f"Day rolled over from {self.displayed_day} to {now.date()}")
        self.displayed_day = now.date()
        return self.ensure_daily_tasks()

    def ensure_daily_tasks(self, day: date | None = None) -> list[Task]:
        """
        Instantiate any daily tasks missing on `day`. Idempotent.

        A title whose instance on `day` sits in the open undo window is skipped;
        restoring it brings that instance back instead.
        """
        day = day or self.today
        templates = daily_tasks_needing_creation(day, self.store.query_all())
        pending = self.undo.pending(self.clock.now())
        if pending is not None and is_same_day(pending.created_at, day):
            templates = [t for t in templates if t.title != pending.title]
        if not templates:
            return []

        created = instantiate_daily(templates, day, self.day_tasks(day), self.completed_first)
        for task in created:
            self.store.insert(task)
        logger.info(f"Created {len(created)} daily task(s) for {day}")
        self._save("Recurrence")
        return created

    # ============== Mutations ==============

    def add_tasks(self, raw: str) -> list[Task]:
        """Bulk add from delimited text; blank fragments are dropped."""
        titles = parse_titles(raw)
        if not titles:
            return []

        now = self.clock.now()
        created = ordering.create_tasks(
            titles, now, self.day_tasks(now), self.completed_first
        )
        for task in created:
            self.store.insert(task)
        self._save("Create")
        return created

    def quick_add(
        self,
        title: str,
        is_daily: bool = False,
        at: time | None = None,
    ) -> Task | None:
        """Add a single task. Blank titles are ignored."""
        if not title.strip():
            return None

        now = self.clock.now()
        created_at = at_time_of_day(now, at) if at else now
        created = ordering.create_tasks(
            [title],
            created_at,
            self.day_tasks(created_at),
            self.completed_first,
            is_daily=is_daily,
        )
        for task in created:
            self.store.insert(task)
        self._save("Create")
        return created[0]

    def toggle(self, task_id: str) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None
        ordering.toggle_completion(task, self.day_tasks(task.day), self.completed_first)
        self._save("Toggle")
        return task

    def move(
        self,
        source: Collection[int],
        destination: int,
        day: date | None = None,
    ) -> bool:
        """Reorder within a completion group. False when the move is rejected."""
        moved = ordering.move_tasks(
            self.day_tasks(day), source, destination, self.completed_first
        )
        if moved is None:
            return False
        self._save("Reorder")
        return True

    def set_completed_first(self, completed_first: bool) -> list[Task]:
        """Choose which completion group shows first."""
        self.completed_first = completed_first
        visible = ordering.set_completed_first(self.day_tasks(), completed_first)
        self._save("Sort")
        return visible

    def flip_order(self) -> list[Task]:
        return self.set_completed_first(not self.completed_first)

    def delete(self, task_id: str) -> DeletedTask | None:
        """Delete a task, keeping it restorable for the undo window."""
        task = self.get(task_id)
        if task is None:
            return None

        snapshot = self.undo.capture(task, self.clock.now())
        self.store.delete(task)
        ordering.remove_task(task, self.day_tasks(task.day), self.completed_first)
        self._save("Delete")
        return snapshot

    def restore(self) -> Task | None:
        """
        Undo the last delete while its window is open.

        The task comes back as a new record on its original day.
        """
        snapshot = self.undo.take(self.clock.now())
        if snapshot is None:
            return None

        task = ordering.restore_task(
            snapshot, self.day_tasks(snapshot.created_at), self.completed_first
        )
        self.store.insert(task)
        self._save("Undo")
        return task

    def edit(
        self,
        task_id: str,
        title: str | None = None,
        time_of_day: time | None = None,
        is_daily: bool | None = None,
    ) -> Task | None:
        """
        Edit title, time of day and/or the daily flag.

        Turning the daily flag off clears it on every task with the same
        title (old and new) so the next rollover does not recreate it.
        """
        task = self.get(task_id)
        if task is None:
            return None

        old_title = task.title
        edit_task(task, title=title, time_of_day=time_of_day, is_daily=is_daily)
        if is_daily is False:
            all_tasks = self.store.query_all()
            cleared = clear_daily_flag(task.title, all_tasks)
            if old_title != task.title:
                cleared += clear_daily_flag(old_title, all_tasks)
            if cleared:
                logger.info(f"Stopped recurrence of '{task.title}' on {len(cleared)} task(s)")
        self._save("Edit")
        return task

    def _save(self, action: str) -> bool:
        if self.store.save():
            return True
        logger.error(f"{action} save error: store did not persist changes")
        return False


# ============== Wiring ==============


def open_session(config: Config, timer: DeferredActions | None = None) -> DailySession:
    """Build a session from config, restoring carried-over state."""
    state = FileSessionState(config.state_path).load(config.completed_first)
    undo = UndoBuffer(ttl=config.undo_seconds, timer=timer)
    if state.undo_snapshot is not None and state.undo_expires_at is not None:
        undo.load(state.undo_snapshot, state.undo_expires_at)

    session = DailySession(
        store=JsonTaskStore(config.data_path),
        clock=SystemClock(config.timezone),
        undo=undo,
        completed_first=state.completed_first,
    )
    session.refresh_day()
    return session


def close_session(session: DailySession, config: Config) -> None:
    """Persist presentation state (group order, live undo snapshot)."""
    snapshot = session.undo.pending(session.clock.now())
    FileSessionState(config.state_path).save(
        SessionState(
            completed_first=session.completed_first,
            undo_snapshot=snapshot,
            undo_expires_at=session.undo.expires_at if snapshot else None,
        )
    )
