"""Pure calendar-day helpers - no I/O dependencies.

All values are naive datetimes in the user's local time.
"""

from datetime import date, datetime, time


def local_date(value: date | datetime) -> date:
    """Calendar date of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    """True when both values fall on the same calendar day."""
    return local_date(a) == local_date(b)


def start_of_day(value: date | datetime) -> datetime:
    """Midnight at the start of the value's calendar day."""
    return datetime.combine(local_date(value), time.min)


def at_time_of_day(day: date | datetime, source: datetime | time) -> datetime:
    """
    Combine a day's date with a time of day.

    The hour, minute and second come from `source`; microseconds are dropped.
    """
    t = source.time() if isinstance(source, datetime) else source
    return datetime.combine(
        local_date(day), time(t.hour, t.minute, t.second)
    )


def is_new_day(displayed: date | datetime | None, now: datetime) -> bool:
    """Detect a day rollover: `now` no longer falls on the displayed day."""
    if displayed is None:
        return True
    return not is_same_day(displayed, now)
