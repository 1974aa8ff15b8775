"""Performance extraction with a priority-ordered strategy chain.

Normalized recognized text is handed to each extraction strategy in turn;
the first strategy that returns any performances wins and the rest are not
consulted.  The default order is ``line_scan`` → ``range_scan``.

All strategies implement ``IExtractionStrategy``, so a parser for a new app
layout can be injected without modifying this file.
"""

from __future__ import annotations

from datetime import date

from festmeet.interfaces.extraction_strategy import IExtractionStrategy
from festmeet.models.performance import Performance
from festmeet.services.extraction_strategies import LineScanStrategy, RangeScanStrategy
from festmeet.utils.errors import ConfigurationError
from festmeet.utils.logging import get_logger

STRATEGY_REGISTRY: dict[str, type[IExtractionStrategy]] = {
    "line_scan": LineScanStrategy,
    "range_scan": RangeScanStrategy,
}


def default_strategies() -> list[IExtractionStrategy]:
    return [LineScanStrategy(), RangeScanStrategy()]


def build_strategies(names: list[str]) -> list[IExtractionStrategy]:
    """Instantiate strategies by name, keeping the given priority order.

    Raises:
        ConfigurationError: If a name is not a known strategy.
    """
    unknown = [name for name in names if name not in STRATEGY_REGISTRY]
    if unknown:
        raise ConfigurationError(
            f"Unknown extraction strategies: {', '.join(unknown)}. "
            f"Known: {', '.join(sorted(STRATEGY_REGISTRY))}"
        )
    return [STRATEGY_REGISTRY[name]() for name in names]


class PerformanceExtractor:
    """Turns normalized schedule text into performance records.

    Never raises for unparseable text.  An empty result means nothing
    could be extracted and the caller should ask for a clearer image.
    """

    def __init__(self, strategies: list[IExtractionStrategy] | None = None) -> None:
        self._strategies = strategies if strategies is not None else default_strategies()
        self._logger = get_logger(__name__)

    def extract(self, text: str, nominal_day: date | None = None) -> list[Performance]:
        """Extract performances from normalized *text*.

        Parameters
        ----------
        text:
            Output of :func:`festmeet.utils.text_normalizer.normalize_recognized_text`.
        nominal_day:
            Date that clock readings are placed on; defaults to today.

        Returns
        -------
        list[Performance]
            Performances from the first strategy that found any, else ``[]``.
        """
        lines = [line.strip() for line in text.split("\n") if line.strip()]
        if not lines:
            self._logger.info("extraction_empty", reason="no_text")
            return []

        day = nominal_day or date.today()

        for strategy in self._strategies:
            name = strategy.get_strategy_name()
            try:
                performances = strategy.extract(lines, day)
            except Exception as exc:
                # A misbehaving strategy must not hide results another
                # strategy could still produce.
                self._logger.warning(
                    "extraction_strategy_failed",
                    strategy=name,
                    error=str(exc),
                )
                continue

            if performances:
                self._logger.info(
                    "extraction_strategy_matched",
                    strategy=name,
                    performances=len(performances),
                )
                return performances

            self._logger.debug("extraction_strategy_no_match", strategy=name)

        self._logger.info("extraction_empty", reason="no_strategy_matched", lines=len(lines))
        return []

    def get_strategy_names(self) -> list[str]:
        return [s.get_strategy_name() for s in self._strategies]
