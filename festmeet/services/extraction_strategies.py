"""Extraction strategies for the two schedule layouts festival apps use.

LineScanStrategy
    One start time per line with the artist and stage on neighbouring lines,
    e.g. the Insomniac app's "Nobodies King / 2:00 PM / Cyberian Stage".
    Stages carry forward to later sets that show none of their own.

RangeScanStrategy
    A ``start - end`` range per set ("Wooli 8:00 PM - 9:00 PM") with the
    artist above or before the range and the stage somewhere nearby.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from festmeet.interfaces.extraction_strategy import IExtractionStrategy
from festmeet.models.performance import ASSUMED_SET_DURATION, Performance
from festmeet.utils.logging import get_logger
from festmeet.utils.schedule_patterns import (
    contains_time,
    find_stage_name,
    find_time_ranges,
    find_time_tokens,
    find_token_run,
    is_stage_line,
    resolve_single_time,
    resolve_time_range,
)
from festmeet.utils.text_normalizer import clean_artist_name

UNKNOWN_STAGE = "Unknown Stage"

# How far around a time reading neighbouring lines are searched.
_LOOKAROUND = 3


def _placeholder_artist(time_text: str) -> str:
    return f"Artist at {time_text}"


# ======================================================================
# Strategy A: one start time per line
# ======================================================================


@dataclass(frozen=True)
class _ScanState:
    """Value carried from line to line by the line scan."""

    last_stage: str = ""
    performances: tuple[Performance, ...] = ()


class LineScanStrategy(IExtractionStrategy):
    """Anchor on lines holding exactly one clock reading."""

    def __init__(self) -> None:
        self._logger = get_logger(__name__)

    def get_strategy_name(self) -> str:
        return "line_scan"

    def extract(self, lines: list[str], nominal_day: date) -> list[Performance]:
        state = _ScanState()
        for index in range(len(lines)):
            state = self._scan_line(lines, index, state, nominal_day)
        return list(state.performances)

    def _scan_line(
        self, lines: list[str], index: int, state: _ScanState, nominal_day: date,
    ) -> _ScanState:
        line = lines[index]
        tokens = find_time_tokens(line)

        if len(tokens) != 1:
            if not tokens and is_stage_line(line):
                return replace(state, last_stage=line)
            return state

        token = tokens[0]
        artist, stage = self._look_forward(lines, index, line[token.end_index:].strip())
        if not artist:
            artist = self._look_backward(lines, index)

        if not artist and not stage and not state.last_stage:
            self._logger.debug("line_scan_anchor_skipped", line=line)
            return state

        last_stage = stage or state.last_stage
        start = resolve_single_time(token, nominal_day)
        performance = Performance(
            artist=clean_artist_name(artist) or _placeholder_artist(token.text),
            stage=last_stage or UNKNOWN_STAGE,
            start=start,
            end=start + ASSUMED_SET_DURATION,
        )
        return _ScanState(
            last_stage=last_stage,
            performances=(*state.performances, performance),
        )

    @staticmethod
    def _look_forward(lines: list[str], index: int, trailing: str) -> tuple[str, str]:
        """Collect artist and stage from the anchor's tail and following lines.

        A stage line closes the set's block; the next clock reading starts
        another block.
        """
        artist = ""
        stage = ""
        if len(trailing) > 1:
            if is_stage_line(trailing):
                return "", trailing
            artist = trailing

        for candidate in lines[index + 1:index + 1 + _LOOKAROUND]:
            if contains_time(candidate):
                break
            if is_stage_line(candidate):
                stage = candidate
                break
            if not artist:
                artist = candidate
        return artist, stage

    @staticmethod
    def _look_backward(lines: list[str], index: int) -> str:
        for offset in range(1, _LOOKAROUND + 1):
            position = index - offset
            if position < 0:
                break
            candidate = lines[position]
            if contains_time(candidate):
                break
            if is_stage_line(candidate) or len(candidate) <= 2:
                continue
            return candidate
        return ""


# ======================================================================
# Strategy B: start/end ranges
# ======================================================================


class RangeScanStrategy(IExtractionStrategy):
    """Anchor on ``start - end`` time ranges."""

    def get_strategy_name(self) -> str:
        return "range_scan"

    def extract(self, lines: list[str], nominal_day: date) -> list[Performance]:
        performances: list[Performance] = []
        for index, line in enumerate(lines):
            previous_end = 0
            for time_range in find_time_ranges(line):
                artist = self._find_artist(lines, index, line[previous_end:time_range.start_index])
                stage = self._find_stage(lines, index, artist)
                start, end = resolve_time_range(time_range, nominal_day)
                performances.append(
                    Performance(
                        artist=clean_artist_name(artist) or _placeholder_artist(time_range.text),
                        stage=stage,
                        start=start,
                        end=end,
                    )
                )
                previous_end = time_range.end_index
        return performances

    @staticmethod
    def _find_artist(lines: list[str], index: int, leading_text: str) -> str:
        """Resolve the artist for a range found on ``lines[index]``.

        Order: the line above, text before the range on the same line, the
        first usable line among the three above, then the nearest
        plausible line anywhere.
        """

        def usable(candidate: str) -> bool:
            return bool(candidate) and not contains_time(candidate) and not is_stage_line(candidate)

        if index > 0 and usable(lines[index - 1]) and clean_artist_name(lines[index - 1]):
            return lines[index - 1]

        leading = clean_artist_name(leading_text)
        if leading:
            return leading

        for position in range(max(0, index - _LOOKAROUND), index):
            if usable(lines[position]) and clean_artist_name(lines[position]):
                return lines[position]

        nearby = [
            (abs(position - index), position)
            for position, candidate in enumerate(lines)
            if not contains_time(candidate) and 3 < len(candidate) < 30
        ]
        if nearby:
            _, closest = min(nearby)
            return lines[closest]
        return ""

    @staticmethod
    def _find_stage(lines: list[str], index: int, artist: str) -> str:
        """Search a seven-line window, nearest lines first.

        A venue-suffixed name anywhere in the window wins; otherwise the
        first plausible token run on a line that is neither a time nor the
        artist.
        """
        window = sorted(
            range(max(0, index - _LOOKAROUND), min(len(lines), index + _LOOKAROUND + 1)),
            key=lambda position: (abs(position - index), position < index),
        )

        for position in window:
            stage = find_stage_name(lines[position])
            if stage:
                return stage

        for position in window:
            candidate = lines[position]
            if contains_time(candidate) or candidate == artist:
                continue
            run = find_token_run(candidate)
            if run:
                return run
        return UNKNOWN_STAGE
