"""Abstract base class for text recognition providers.

Defines the contract for any engine that reads the text of a schedule
screenshot.  Swapping engines requires only a new concrete class; the
recognition service and ingestion pipeline depend on this interface alone.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Union

from festmeet.models.recognition import RecognitionResult, ScheduleImage

# Receives recognition progress for one image as a percentage (0-100).
# May be a plain function or a coroutine function.
ProgressCallback = Callable[[float], Union[None, Awaitable[None]]]


# Concrete implementations: TesseractRecognitionProvider
# Located in: festmeet/providers/recognition/
# RecognitionService (festmeet/services/recognition_service.py) tries
# providers in priority order and keeps the first confident result.
class IRecognitionProvider(ABC):
    """Contract for engines that turn a schedule image into text."""

    @abstractmethod
    async def recognize(
        self,
        image: ScheduleImage,
        on_progress: ProgressCallback | None = None,
    ) -> RecognitionResult:
        """Read the text of *image*.

        Parameters
        ----------
        image:
            The screenshot to process.  ``image.image_data`` holds the raw
            bytes.
        on_progress:
            Optional callback receiving 0-100 progress for this image.

        Returns
        -------
        RecognitionResult
            Raw text, overall confidence and processing time.

        Raises
        ------
        festmeet.utils.errors.RecognitionError
            If the engine fails.  Terminal for this image only.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"tesseract"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the engine is installed and usable.

        Must not perform a full recognition pass.
        """
