"""Snap recognized artist names to a known festival lineup.

Recognition regularly mangles names ("N0bodies Kinq", "Jeanie b2b Vampa
Forbidden").  When the lineup of the festival is known in advance, a
recognized performance whose artist closely matches a lineup entry takes
the lineup's spelling, and its stage when the recognized one is unknown.

This is an optional correction step applied after extraction; extraction
itself never depends on a lineup.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import time
from typing import Any

from pydantic import BaseModel, ConfigDict

from festmeet.models.performance import Performance
from festmeet.utils.logging import get_logger
from festmeet.utils.text_normalizer import fuzzy_match

_UNKNOWN_STAGE = "unknown stage"


class LineupEntry(BaseModel):
    """One published slot of a festival lineup."""

    model_config = ConfigDict(frozen=True)

    artist: str
    stage: str
    start: time | None = None


class ReferenceLineup:
    """A known lineup used to correct recognized performances.

    Parameters
    ----------
    entries:
        ``LineupEntry`` objects or mappings with ``artist``, ``stage`` and
        optional ``start`` (``"HH:MM"``).
    threshold:
        Minimum rapidfuzz token-sort similarity (0.0 to 1.0) for a match.
    """

    def __init__(self, entries: Iterable[LineupEntry | Mapping[str, Any]], threshold: float = 0.8) -> None:
        self._entries = [
            entry if isinstance(entry, LineupEntry) else LineupEntry.model_validate(dict(entry))
            for entry in entries
        ]
        self._threshold = threshold
        self._by_artist = {entry.artist: entry for entry in self._entries}
        self._logger = get_logger(__name__)

    @property
    def entries(self) -> list[LineupEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def match_artist(self, name: str) -> LineupEntry | None:
        """Return the lineup entry whose artist best matches *name*."""
        result = fuzzy_match(name, list(self._by_artist), threshold=self._threshold)
        if result is None:
            return None
        matched, _ = result
        return self._by_artist[matched]

    def correct(self, performance: Performance) -> Performance:
        """Return *performance* with lineup spelling applied, when it matches."""
        entry = self.match_artist(performance.artist)
        if entry is None:
            return performance

        updates: dict[str, Any] = {}
        if entry.artist != performance.artist:
            updates["artist"] = entry.artist
        if not performance.stage or performance.stage.strip().lower() == _UNKNOWN_STAGE:
            updates["stage"] = entry.stage
        if not updates:
            return performance

        self._logger.debug(
            "lineup_correction_applied",
            recognized=performance.artist,
            corrected=updates.get("artist", performance.artist),
            stage=updates.get("stage", performance.stage),
        )
        return performance.model_copy(update=updates)

    def correct_all(self, performances: Iterable[Performance]) -> list[Performance]:
        return [self.correct(performance) for performance in performances]
