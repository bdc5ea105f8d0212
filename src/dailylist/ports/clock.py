"""Clock interface."""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current local time."""

    def now(self) -> datetime:
        """Current naive local datetime."""
        ...
