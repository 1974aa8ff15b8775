"""Abstract base class for performance extraction strategies.

Festival apps lay out their schedules differently, so extraction is a
priority-ordered list of strategies rather than one parser.  Each strategy
recognises one family of layouts and returns an empty list when the text
does not look like that family.  Adding a new layout means adding a
strategy, not touching the existing ones.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from festmeet.models.performance import Performance


# Concrete implementations: LineScanStrategy, RangeScanStrategy
# Located in: festmeet/services/extraction_strategies.py
# PerformanceExtractor (festmeet/services/performance_extractor.py) tries
# them in order and keeps the first non-empty result.
class IExtractionStrategy(ABC):
    """Contract for turning normalized schedule lines into performances."""

    @abstractmethod
    def extract(self, lines: list[str], nominal_day: date) -> list[Performance]:
        """Parse *lines* into performances placed on *nominal_day*.

        Parameters
        ----------
        lines:
            Non-empty, stripped lines of normalized recognized text.
        nominal_day:
            Calendar date that clock readings are anchored to.

        Returns
        -------
        list[Performance]
            The performances found, or an empty list when this strategy
            does not recognise the layout.  Must not raise for
            unparseable text.
        """

    @abstractmethod
    def get_strategy_name(self) -> str:
        """Return a short identifier, e.g. ``"line_scan"``."""
