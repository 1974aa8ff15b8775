"""Free-time discovery within one person's schedule.

Every performance is treated as occupying one hour from its start, whatever
end time it carries, and the festival day is bounded by 12:00 and 06:00 the
following morning.  Whatever is not occupied inside that window is free.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from festmeet.models.meetup import Gap, MeetupPolicy
from festmeet.models.performance import ASSUMED_SET_DURATION
from festmeet.services.deduplicator import coerce_performances
from festmeet.utils.festival_clock import festival_day_of, festival_window
from festmeet.utils.logging import get_logger

_logger = get_logger(__name__)


def find_time_gaps(
    performances: Iterable[Any] | None,
    festival_day: date | None = None,
    policy: MeetupPolicy | None = None,
) -> list[Gap]:
    """Return the chronological free intervals of one schedule.

    Args:
        performances: Performance records or mappings; malformed entries are
            skipped.
        festival_day: Calendar date the festival day starts on.  Defaults to
            the festival day of the earliest performance.
        policy: Supplies the festival-day window hours.

    Returns:
        Leading, internal and trailing gaps, never overlapping and never of
        zero length.  Empty when there are no usable performances.
    """
    policy = policy or MeetupPolicy()
    ordered = sorted(coerce_performances(performances), key=lambda p: p.start)
    if not ordered:
        return []

    first = ordered[0]
    day = festival_day or festival_day_of(first.start, policy.clock_day_start_hour)
    window_start, window_end = festival_window(
        day,
        policy.festival_day_start_hour,
        policy.festival_day_end_hour,
    )

    gaps: list[Gap] = []
    if first.start > window_start:
        gaps.append(
            Gap(
                start=window_start,
                end=first.start,
                following_artist=first.artist,
                following_stage=first.stage,
            )
        )

    for current, following in zip(ordered, ordered[1:]):
        current_end = current.start + ASSUMED_SET_DURATION
        if following.start > current_end:
            gaps.append(
                Gap(
                    start=current_end,
                    end=following.start,
                    preceding_artist=current.artist,
                    following_artist=following.artist,
                    following_stage=following.stage,
                )
            )

    last = ordered[-1]
    last_end = last.start + ASSUMED_SET_DURATION
    if last_end < window_end:
        gaps.append(Gap(start=last_end, end=window_end, preceding_artist=last.artist))

    _logger.debug(
        "time_gaps_found",
        performances=len(ordered),
        gaps=len(gaps),
        festival_day=day.isoformat(),
    )
    return gaps


def find_internal_gaps(
    performances: Iterable[Any] | None,
    policy: MeetupPolicy | None = None,
) -> list[Gap]:
    """Gaps that sit between two of the owner's own performances."""
    return [gap for gap in find_time_gaps(performances, policy=policy) if gap.is_internal]
