"""Festival-day arithmetic.

A festival "day" runs from the afternoon into the early hours of the next
calendar date, so ordering by wall-clock time would put a 01:00 set before
a 14:00 one.  The festival clock shifts the start of the sortable day to
08:00 so late-night sets follow the evening they belong to.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from festmeet.models.performance import Performance

CLOCK_DAY_START_HOUR = 8
FESTIVAL_DAY_START_HOUR = 12
FESTIVAL_DAY_END_HOUR = 6


def festival_sort_minutes(moment: datetime, day_start_hour: int = CLOCK_DAY_START_HOUR) -> int:
    """Minutes since the festival clock's day start (08:00 by default).

    ``(hour < 8 ? hour + 16 : hour - 8) * 60 + minute`` for the default
    start hour.
    """
    shifted_hour = (moment.hour - day_start_hour) % 24
    return shifted_hour * 60 + moment.minute


def festival_day_of(moment: datetime, day_start_hour: int = CLOCK_DAY_START_HOUR) -> date:
    """Calendar date of the festival day *moment* belongs to.

    Anything before the clock's day start counts toward the previous night.
    """
    if moment.hour < day_start_hour:
        return moment.date() - timedelta(days=1)
    return moment.date()


def festival_window(
    day: date,
    start_hour: int = FESTIVAL_DAY_START_HOUR,
    end_hour: int = FESTIVAL_DAY_END_HOUR,
) -> tuple[datetime, datetime]:
    """Return the ``[start, end)`` bounds of the festival day starting on *day*.

    The end falls on the following calendar date whenever ``end_hour`` is
    not after ``start_hour`` (the default 12:00 → 06:00 window).
    """
    window_start = datetime.combine(day, time(hour=start_hour))
    end_day = day + timedelta(days=1) if end_hour <= start_hour else day
    window_end = datetime.combine(end_day, time(hour=end_hour))
    return window_start, window_end


def sort_by_festival_clock(
    performances: Iterable[Performance],
    day_start_hour: int = CLOCK_DAY_START_HOUR,
) -> list[Performance]:
    """Order performances by festival clock; ties keep their input order."""
    return sorted(performances, key=lambda p: festival_sort_minutes(p.start, day_start_hour))
