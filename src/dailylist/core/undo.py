"""Single-slot undo buffer for the most recent delete."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dailylist.ports.timer import DeferredActions, ScheduledAction

    from .tasks import Task

logger = logging.getLogger(__name__)

DEFAULT_UNDO_SECONDS = 5.0


@dataclass(frozen=True)
class DeletedTask:
    """Snapshot of a deleted task, enough to recreate it."""

    id: str
    title: str
    created_at: datetime
    is_completed: bool
    former_position: float
    is_daily: bool = False

    @classmethod
    def from_task(cls, task: "Task") -> "DeletedTask":
        return cls(
            id=task.id,
            title=task.title,
            created_at=task.created_at,
            is_completed=task.is_completed,
            former_position=task.position,
            is_daily=task.is_daily,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at.isoformat(),
            "is_completed": self.is_completed,
            "former_position": self.former_position,
            "is_daily": self.is_daily,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DeletedTask":
        return cls(
            id=data["id"],
            title=data["title"],
            created_at=datetime.fromisoformat(data["created_at"]),
            is_completed=bool(data.get("is_completed", False)),
            former_position=float(data.get("former_position", 0.0)),
            is_daily=bool(data.get("is_daily", False)),
        )


class UndoBuffer:
    """
    Holds at most one deleted-task snapshot for `ttl` seconds.

    A new capture overwrites the previous one. Expiry runs through the optional
    timer; without one, `pending()` expires the slot lazily once `now` passes
    `expires_at`.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_UNDO_SECONDS,
        timer: "DeferredActions | None" = None,
    ):
        self.ttl = ttl
        self.timer = timer
        self.snapshot: DeletedTask | None = None
        self.expires_at: datetime | None = None
        self._pending_expiry: "ScheduledAction | None" = None

    @property
    def is_visible(self) -> bool:
        """Whether the undo affordance should be shown."""
        return self.snapshot is not None

    def capture(self, task: "Task", now: datetime) -> DeletedTask:
        """Remember a deleted task, replacing any earlier snapshot."""
        self._cancel_expiry()
        self.snapshot = DeletedTask.from_task(task)
        self.expires_at = now + timedelta(seconds=self.ttl)
        if self.timer is not None:
            self._pending_expiry = self.timer.schedule(self.ttl, self.expire)
        logger.debug(f"Captured '{self.snapshot.title}' for undo until {self.expires_at}")
        return self.snapshot

    def load(self, snapshot: DeletedTask, expires_at: datetime) -> None:
        """Reinstate a snapshot carried over from an earlier process."""
        self._cancel_expiry()
        self.snapshot = snapshot
        self.expires_at = expires_at

    def expire(self) -> None:
        """Clear the slot and hide the affordance."""
        if self.snapshot is not None:
            logger.debug(f"Undo window closed for '{self.snapshot.title}'")
        self.snapshot = None
        self.expires_at = None
        self._pending_expiry = None

    def pending(self, now: datetime | None = None) -> DeletedTask | None:
        """The live snapshot, or None if empty or expired."""
        if self.snapshot is None:
            return None
        if now is not None and self.expires_at is not None and now >= self.expires_at:
            self._cancel_expiry()
            self.expire()
            return None
        return self.snapshot

    def remaining(self, now: datetime) -> float:
        """Seconds left in the undo window (0 when nothing is pending)."""
        if self.pending(now) is None or self.expires_at is None:
            return 0.0
        return max((self.expires_at - now).total_seconds(), 0.0)

    def take(self, now: datetime | None = None) -> DeletedTask | None:
        """Hand out the live snapshot and empty the slot."""
        snapshot = self.pending(now)
        if snapshot is None:
            return None
        self._cancel_expiry()
        self.expire()
        return snapshot

    def _cancel_expiry(self) -> None:
        if self._pending_expiry is not None:
            self._pending_expiry.cancel()
            self._pending_expiry = None
