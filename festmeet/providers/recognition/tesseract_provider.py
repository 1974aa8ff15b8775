"""Tesseract recognition provider for schedule screenshots.

Wraps pytesseract.  Screenshots are preprocessed (grayscale, dark-mode
inversion, resize, contrast), then read with a character whitelist suited to
set-time listings and an automatic page-segmentation mode.  Tesseract is a
blocking subprocess call, so it runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import io
import shlex
import time

import pytesseract
from PIL import Image

from festmeet.interfaces.recognition_provider import IRecognitionProvider, ProgressCallback
from festmeet.models.recognition import RecognitionResult, ScheduleImage
from festmeet.utils.errors import RecognitionError
from festmeet.utils.image_preprocessor import ScreenshotPreprocessor
from festmeet.utils.logging import get_logger

DEFAULT_CHAR_WHITELIST = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789:. -@&"
)
# Fully automatic page segmentation, no orientation detection.
DEFAULT_PAGE_SEGMENTATION_MODE = 3


async def report_progress(callback: ProgressCallback | None, percent: float) -> None:
    """Invoke a sync or async progress callback."""
    if callback is None:
        return
    result = callback(percent)
    if asyncio.iscoroutine(result):
        await result


class TesseractRecognitionProvider(IRecognitionProvider):
    """Recognition provider backed by Google Tesseract via pytesseract."""

    def __init__(
        self,
        char_whitelist: str = DEFAULT_CHAR_WHITELIST,
        page_segmentation_mode: int = DEFAULT_PAGE_SEGMENTATION_MODE,
        tesseract_cmd: str | None = None,
        preprocessor: ScreenshotPreprocessor | None = None,
    ) -> None:
        self._char_whitelist = char_whitelist
        self._page_segmentation_mode = page_segmentation_mode
        self._preprocessor = preprocessor or ScreenshotPreprocessor()
        self._logger = get_logger(__name__)
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    # ------------------------------------------------------------------
    # IRecognitionProvider interface
    # ------------------------------------------------------------------

    async def recognize(
        self,
        image: ScheduleImage,
        on_progress: ProgressCallback | None = None,
    ) -> RecognitionResult:
        start = time.perf_counter()
        image_bytes = image.image_data
        if image_bytes is None:
            raise RecognitionError(
                "No image data provided",
                provider_name=self.get_provider_name(),
            )

        await report_progress(on_progress, 0.0)
        try:
            raw_text, confidence = await asyncio.to_thread(self._run_tesseract, image_bytes)
        except Exception as exc:
            elapsed = time.perf_counter() - start
            self._logger.error(
                "recognition_failed",
                provider="tesseract",
                filename=image.filename,
                error=str(exc),
                processing_time=round(elapsed, 3),
            )
            raise RecognitionError(
                f"Tesseract recognition failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        elapsed = time.perf_counter() - start
        await report_progress(on_progress, 100.0)

        self._logger.info(
            "recognition_complete",
            provider="tesseract",
            filename=image.filename,
            confidence=round(confidence, 4),
            characters=len(raw_text),
            processing_time=round(elapsed, 3),
        )
        return RecognitionResult(
            raw_text=raw_text,
            confidence=confidence,
            provider_used=self.get_provider_name(),
            processing_time=elapsed,
        )

    def get_provider_name(self) -> str:
        return "tesseract"

    def is_available(self) -> bool:
        """Check that the Tesseract binary can be found and run."""
        try:
            pytesseract.get_tesseract_version()
            return True
        except (pytesseract.TesseractNotFoundError, OSError):
            return False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def tesseract_config(self) -> str:
        """Command-line options passed through to Tesseract."""
        whitelist = shlex.quote(f"tessedit_char_whitelist={self._char_whitelist}")
        return f"-c {whitelist} --psm {self._page_segmentation_mode}"

    def _run_tesseract(self, image_bytes: bytes) -> tuple[str, float]:
        """Run Tesseract and rebuild the text line by line.

        Uses ``image_to_data`` so word confidences come from the same pass
        as the text.  Lines are separated whenever Tesseract's block,
        paragraph or line number changes.
        """
        original = Image.open(io.BytesIO(image_bytes))
        prepared = self._preprocessor.prepare(original)
        data = pytesseract.image_to_data(
            prepared, output_type=pytesseract.Output.DICT, config=self.tesseract_config,
        )

        lines: list[list[str]] = []
        confidences: list[float] = []
        previous_line: tuple[int, int, int] | None = None

        for i, raw_word in enumerate(data["text"]):
            word = raw_word.strip()
            conf = float(data["conf"][i])
            # conf == -1 marks layout rows rather than words
            if not word or conf < 0:
                continue
            line_id = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            if line_id != previous_line:
                lines.append([])
                previous_line = line_id
            lines[-1].append(word)
            confidences.append(conf)

        raw_text = "\n".join(" ".join(words) for words in lines)
        confidence = (sum(confidences) / len(confidences) / 100.0) if confidences else 0.0
        return raw_text, min(1.0, max(0.0, confidence))
