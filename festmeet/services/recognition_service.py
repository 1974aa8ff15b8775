"""Text recognition with a multi-provider fallback chain.

Providers are tried in priority order until one returns a result with
acceptable confidence.  A result below the threshold is held back in case
nothing better turns up, so the caller gets *something* unless every
provider is unavailable or fails.

All providers implement ``IRecognitionProvider``, so another engine can be
injected without modifying this file.
"""

from __future__ import annotations

from festmeet.interfaces.recognition_provider import IRecognitionProvider, ProgressCallback
from festmeet.models.recognition import RecognitionResult, ScheduleImage
from festmeet.utils.errors import RecognitionError
from festmeet.utils.logging import get_logger

# Results below this confidence let the chain continue to the next provider.
_DEFAULT_CONFIDENCE_THRESHOLD = 0.6


class RecognitionService:
    """Orchestrates recognition across multiple providers.

    The first result meeting ``min_confidence`` is returned immediately.
    Otherwise the best sub-threshold result is returned.  If every provider
    is unavailable or raises, :class:`RecognitionError` is raised.
    """

    def __init__(
        self,
        providers: list[IRecognitionProvider],
        min_confidence: float = _DEFAULT_CONFIDENCE_THRESHOLD,
    ) -> None:
        self._providers = providers
        self._min_confidence = min_confidence
        self._logger = get_logger(__name__)

    @property
    def providers(self) -> list[IRecognitionProvider]:
        return list(self._providers)

    async def recognize(
        self,
        image: ScheduleImage,
        on_progress: ProgressCallback | None = None,
    ) -> RecognitionResult:
        """Recognize *image* using the provider fallback chain.

        Parameters
        ----------
        image:
            The schedule screenshot to read.
        on_progress:
            Forwarded to each provider attempted.

        Raises
        ------
        RecognitionError
            If every provider is unavailable or raises.
        """
        best_result: RecognitionResult | None = None

        for provider in self._providers:
            name = provider.get_provider_name()

            if not provider.is_available():
                self._logger.warning("recognition_provider_unavailable", provider=name)
                continue

            try:
                self._logger.info("recognition_provider_attempting", provider=name)
                result = await provider.recognize(image, on_progress)
            except Exception as exc:
                # One provider failing is not fatal while others remain.
                self._logger.warning(
                    "recognition_provider_failed",
                    provider=name,
                    error=str(exc),
                )
                continue

            if result.confidence >= self._min_confidence:
                self._logger.info(
                    "recognition_provider_accepted",
                    provider=name,
                    confidence=round(result.confidence, 4),
                )
                return result

            if best_result is None or result.confidence > best_result.confidence:
                best_result = result
                self._logger.info(
                    "recognition_provider_below_threshold",
                    provider=name,
                    confidence=round(result.confidence, 4),
                )

        if best_result is not None:
            self._logger.info(
                "recognition_returning_best_fallback",
                provider=best_result.provider_used,
                confidence=round(best_result.confidence, 4),
            )
            return best_result

        raise RecognitionError("All recognition providers failed")

    def get_available_providers(self) -> list[str]:
        """Return the names of providers that are currently available."""
        return [p.get_provider_name() for p in self._providers if p.is_available()]
