"""Custom exception hierarchy for festmeet.

All application exceptions inherit from :class:`FestmeetError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "tesseract") caused the failure.

    FestmeetError  (base -- catch-all for any festmeet error)
    +-- RecognitionError          (image-to-text recognition of one screenshot)
    +-- ProviderUnavailableError  (recognition engine missing / unreachable)
    +-- ManualEntryError          (hand-typed performance failed validation)
    +-- ConfigurationError        (startup / missing config)

Only recognition failures cross the core boundary.  Empty extractions,
malformed records and meetup windows with too few participants are absorbed
by the component that detects them and never raised.
"""

from __future__ import annotations


class FestmeetError(Exception):
    """Base exception for all festmeet errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[tesseract] Recognition failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Recognition errors
# ---------------------------------------------------------------------------

class RecognitionError(FestmeetError):
    """Raised when text recognition of a single schedule image fails.

    Terminal for that image only; the ingestion pipeline records it and
    moves on to the next image.
    """

    def __init__(
        self,
        message: str = "Text recognition failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(FestmeetError):
    """Raised when a recognition engine is not installed or unreachable."""

    def __init__(
        self,
        message: str = "Recognition provider is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Input / configuration errors
# ---------------------------------------------------------------------------

class ManualEntryError(FestmeetError):
    """Raised when a hand-typed performance is missing a required field.

    ``field_errors`` maps each field name (``artist``, ``stage``, ``start``)
    to ``True`` when that field is invalid so a form can flag it.
    """

    def __init__(
        self,
        message: str = "Manual entry is incomplete",
        field_errors: dict[str, bool] | None = None,
    ) -> None:
        super().__init__(message=message)
        self._field_errors = dict(field_errors or {})

    @property
    def field_errors(self) -> dict[str, bool]:
        return dict(self._field_errors)


class ConfigurationError(FestmeetError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
