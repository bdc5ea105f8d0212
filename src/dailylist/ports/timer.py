"""Deferred action interface."""

from typing import Callable, Protocol


class ScheduledAction(Protocol):
    """Handle for a pending deferred callback."""

    def cancel(self) -> None:
        """Cancel the callback. Safe to call after it already ran."""
        ...


class DeferredActions(Protocol):
    """Interface for running a callback once after a delay."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledAction:
        """Run `callback` after `delay` seconds."""
        ...
