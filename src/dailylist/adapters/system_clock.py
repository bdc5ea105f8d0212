"""System clock adapter."""

from datetime import datetime
from zoneinfo import ZoneInfo


class SystemClock:
    """
    Wall clock in the configured time zone.

    Implements Clock protocol. Returns naive datetimes so every comparison in
    the core happens in one local calendar; an empty zone means system local.
    """

    def __init__(self, timezone: str = ""):
        self.timezone = timezone
        self._tz = ZoneInfo(timezone) if timezone else None

    def now(self) -> datetime:
        if self._tz is None:
            return datetime.now()
        return datetime.now(self._tz).replace(tzinfo=None)
