"""Hand-typed performances.

When recognition misses a set, or a person has no screenshot at all, sets
are typed in as artist, stage and a 24-hour ``HH:MM`` start.  Names are
title-cased so "SLANDER b2b svdden death" and "Slander B2b Svdden Death"
end up as the same record.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date
from typing import Any

from festmeet.models.performance import Performance
from festmeet.services.deduplicator import coerce_performances, deduplicate_performances
from festmeet.utils.errors import ManualEntryError
from festmeet.utils.festival_clock import CLOCK_DAY_START_HOUR, sort_by_festival_clock
from festmeet.utils.logging import get_logger
from festmeet.utils.schedule_patterns import on_day
from festmeet.utils.text_normalizer import title_case_name

_logger = get_logger(__name__)

_START_TEXT = re.compile(r"^\s*(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*$")


def _parse_start(start_text: str | None) -> tuple[int, int] | None:
    match = _START_TEXT.match(start_text or "")
    if match is None:
        return None
    hour, minute = int(match.group("hour")), int(match.group("minute"))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def build_manual_performance(
    artist: str | None,
    stage: str | None,
    start_text: str | None,
    nominal_day: date | None = None,
) -> Performance:
    """Validate and build a performance from form input.

    Args:
        artist: Artist name as typed.
        stage: Stage name as typed.
        start_text: 24-hour start time, ``HH:MM``.
        nominal_day: Date the start is placed on; defaults to today.

    Returns:
        The performance with title-cased names and no explicit end.

    Raises:
        ManualEntryError: When any field is blank or the start does not
            parse.  ``field_errors`` flags each offending field.
    """
    parsed_start = _parse_start(start_text)
    field_errors = {
        "artist": not (artist or "").strip(),
        "stage": not (stage or "").strip(),
        "start": parsed_start is None,
    }
    if any(field_errors.values()):
        invalid = ", ".join(name for name, failed in field_errors.items() if failed)
        raise ManualEntryError(f"Invalid or missing fields: {invalid}", field_errors=field_errors)

    hour, minute = parsed_start
    return Performance(
        artist=title_case_name(artist),
        stage=title_case_name(stage),
        start=on_day(nominal_day or date.today(), hour, minute),
    )


def add_manual_performance(
    existing: Iterable[Any] | None,
    artist: str | None,
    stage: str | None,
    start_text: str | None,
    nominal_day: date | None = None,
    day_start_hour: int = CLOCK_DAY_START_HOUR,
) -> list[Performance]:
    """Merge a typed-in performance into *existing* and re-sort.

    The new record goes through the deduplicator, so it replaces any
    recognized record with the same identity.  The result is ordered by
    festival clock.

    Raises:
        ManualEntryError: Propagated from :func:`build_manual_performance`.
    """
    performance = build_manual_performance(artist, stage, start_text, nominal_day)
    merged = deduplicate_performances(list(existing or []), [performance])
    result = sort_by_festival_clock(coerce_performances(merged), day_start_hour)
    _logger.info(
        "manual_performance_added",
        artist=performance.artist,
        stage=performance.stage,
        start=performance.start.isoformat(),
        total=len(result),
    )
    return result
