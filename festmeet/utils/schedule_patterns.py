"""Time, time-range and stage patterns shared by the extraction strategies.

Times on festival-app screenshots come as ``2:00 PM``, ``2.00PM``,
``14:00`` or (after a misread) ``2l00``; ranges join two of those with a
hyphen or a long dash.  A missing meridiem is resolved heuristically, see
:func:`resolve_meridiems`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from festmeet.utils.text_normalizer import VENUE_SUFFIXES

_VENUE_ALTERNATION = "|".join(VENUE_SUFFIXES)
_DASHES = "-‒–—―−"

_SINGLE_TIME = re.compile(
    r"\b(?P<hour>\d{1,2})"
    r"(?:[:.lI](?P<minute>\d{2})(?!\d)(?:\s*(?P<meridiem>[AaPp][Mm])\b)?"
    r"|(?P<bare_minute>\d{2})\s*(?P<bare_meridiem>[AaPp][Mm])\b)"
)

_TIME_RANGE = re.compile(
    r"\b(?P<start_hour>\d{1,2})[:.](?P<start_minute>\d{2})(?!\d)"
    r"(?:\s*(?P<start_meridiem>[AaPp][Mm])\b)?"
    rf"\s*[{_DASHES}]\s*"
    r"(?P<end_hour>\d{1,2})[:.](?P<end_minute>\d{2})(?!\d)"
    r"(?:\s*(?P<end_meridiem>[AaPp][Mm])\b)?"
)

# A whole line naming a stage: it ends in a venue-type word.
_STAGE_LINE = re.compile(r"\b(?:" + _VENUE_ALTERNATION + r")\s*$", re.IGNORECASE)

# A stage name inside a longer line: up to three words (never a meridiem)
# followed by a venue-type word.
_STAGE_NAME = re.compile(
    r"(?i:\b(?:(?!(?:am|pm)\b)[a-z][\w'&-]*\s+){0,3}(?:" + _VENUE_ALTERNATION + r")\b)"
)

# A run of name-like tokens for the loose stage fallback.
_TOKEN_RUN = re.compile(r"[\w'&-]+(?:\s+[\w'&-]+)*")

AM = "AM"
PM = "PM"


@dataclass(frozen=True)
class TimeToken:
    """One clock reading found in a line of text."""

    hour: int
    minute: int
    meridiem: str | None
    text: str
    start_index: int
    end_index: int


@dataclass(frozen=True)
class TimeRange:
    """A ``start - end`` reading found in a line of text."""

    start: TimeToken
    end: TimeToken
    text: str
    start_index: int
    end_index: int


def _valid_clock(hour: int, minute: int, meridiem: str | None) -> bool:
    if minute > 59:
        return False
    if meridiem is not None:
        return 0 <= hour <= 12
    return 0 <= hour <= 23


def find_time_tokens(line: str) -> list[TimeToken]:
    """Return every valid single clock reading in *line*, left to right."""
    tokens: list[TimeToken] = []
    for match in _SINGLE_TIME.finditer(line):
        hour = int(match.group("hour"))
        minute = int(match.group("minute") or match.group("bare_minute"))
        raw_meridiem = match.group("meridiem") or match.group("bare_meridiem")
        meridiem = raw_meridiem.upper() if raw_meridiem else None
        if not _valid_clock(hour, minute, meridiem):
            continue
        tokens.append(
            TimeToken(
                hour=hour,
                minute=minute,
                meridiem=meridiem,
                text=match.group(0),
                start_index=match.start(),
                end_index=match.end(),
            )
        )
    return tokens


def contains_time(line: str) -> bool:
    return bool(find_time_tokens(line))


def find_time_ranges(line: str) -> list[TimeRange]:
    """Return every valid ``start - end`` reading in *line*, left to right."""
    ranges: list[TimeRange] = []
    for match in _TIME_RANGE.finditer(line):
        start_meridiem = match.group("start_meridiem")
        end_meridiem = match.group("end_meridiem")
        start = TimeToken(
            hour=int(match.group("start_hour")),
            minute=int(match.group("start_minute")),
            meridiem=start_meridiem.upper() if start_meridiem else None,
            text=line[match.start("start_hour"):match.end("start_minute")],
            start_index=match.start("start_hour"),
            end_index=match.end("start_minute"),
        )
        end = TimeToken(
            hour=int(match.group("end_hour")),
            minute=int(match.group("end_minute")),
            meridiem=end_meridiem.upper() if end_meridiem else None,
            text=line[match.start("end_hour"):match.end("end_minute")],
            start_index=match.start("end_hour"),
            end_index=match.end("end_minute"),
        )
        if not (
            _valid_clock(start.hour, start.minute, start.meridiem)
            and _valid_clock(end.hour, end.minute, end.meridiem)
        ):
            continue
        ranges.append(
            TimeRange(
                start=start,
                end=end,
                text=match.group(0).strip(),
                start_index=match.start(),
                end_index=match.end(),
            )
        )
    return ranges


def is_stage_line(line: str) -> bool:
    """True when *line* ends in a generic venue-type word ("Cyberian Stage")."""
    return bool(_STAGE_LINE.search(line))


def find_stage_name(line: str) -> str | None:
    """Return the venue-suffixed stage name inside *line*, if any."""
    match = _STAGE_NAME.search(line)
    if match is None:
        return None
    return match.group(0).strip()


def find_token_run(line: str, min_length: int = 4, max_length: int = 25) -> str | None:
    """Return the first name-like token run of acceptable length in *line*."""
    for match in _TOKEN_RUN.finditer(line):
        candidate = match.group(0).strip()
        if min_length <= len(candidate) <= max_length:
            return candidate
    return None


# ------------------------------------------------------------------
# Meridiem resolution
# ------------------------------------------------------------------


def resolve_meridiems(
    start_hour: int,
    start_meridiem: str | None,
    end_hour: int | None = None,
    end_meridiem: str | None = None,
) -> tuple[str, str | None]:
    """Fill in missing AM/PM markers for a start (and optional end) reading.

    Rules, applied only to a side the text left unmarked:

    * neither side marked: both default to PM (evening-skewed event);
    * one side marked: the other takes the same marker;
    * start hour of 12 or more: the start is AM (a 24-hour reading, or
      midnight for "12");
    * start hour above an end hour below 6: the end is AM (overnight set).

    Returns:
        ``(start_meridiem, end_meridiem)``; the end is ``None`` when no end
        hour was given.
    """
    resolved_start = start_meridiem or end_meridiem or PM
    resolved_end: str | None = None
    if end_hour is not None:
        resolved_end = end_meridiem or start_meridiem or PM

    if start_meridiem is None and start_hour >= 12:
        resolved_start = AM

    if (
        end_hour is not None
        and end_meridiem is None
        and start_hour > end_hour
        and end_hour < 6
    ):
        resolved_end = AM

    return resolved_start, resolved_end


def to_24_hour(hour: int, meridiem: str) -> int:
    """Convert a 12-hour reading to 24-hour; 24-hour readings pass through."""
    if meridiem == PM and hour < 12:
        return hour + 12
    if meridiem == AM and hour == 12:
        return 0
    return hour


def on_day(nominal_day: date, hour: int, minute: int) -> datetime:
    return datetime.combine(nominal_day, time(hour=hour, minute=minute))


def resolve_time_range(
    time_range: TimeRange, nominal_day: date,
) -> tuple[datetime, datetime]:
    """Turn a range reading into absolute start/end on *nominal_day*.

    An end that falls before the start is moved to the following day.
    """
    start_meridiem, end_meridiem = resolve_meridiems(
        time_range.start.hour,
        time_range.start.meridiem,
        time_range.end.hour,
        time_range.end.meridiem,
    )
    start = on_day(
        nominal_day, to_24_hour(time_range.start.hour, start_meridiem), time_range.start.minute,
    )
    end = on_day(
        nominal_day, to_24_hour(time_range.end.hour, end_meridiem or start_meridiem), time_range.end.minute,
    )
    if end < start:
        end += timedelta(hours=24)
    return start, end


def resolve_single_time(token: TimeToken, nominal_day: date) -> datetime:
    """Turn a single clock reading into an absolute start on *nominal_day*."""
    meridiem, _ = resolve_meridiems(token.hour, token.meridiem)
    return on_day(nominal_day, to_24_hour(token.hour, meridiem), token.minute)
