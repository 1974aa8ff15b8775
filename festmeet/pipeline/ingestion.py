"""Schedule ingestion: screenshots in, one person's performance list out.

Each image goes through the same sequence, one image at a time:

    1. RECOGNITION  -- the recognition service reads the screenshot
    2. EXTRACTION   -- text is normalized and performances extracted,
                       optionally snapped to a known lineup
    3. MERGE        -- new performances are deduplicated into the running
                       list

A recognition failure or an empty extraction is recorded in that image's
``ImageOutcome`` and the run moves on, so one bad screenshot never discards
what the others produced.  The merged list is ordered by festival clock.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date

from festmeet.interfaces.recognition_provider import IRecognitionProvider
from festmeet.models.ingestion import ImageOutcome, IngestionPhase, IngestionReport
from festmeet.models.performance import Performance
from festmeet.models.recognition import ScheduleImage
from festmeet.pipeline.progress_tracker import ProgressTracker
from festmeet.services.deduplicator import deduplicate_performances, unique_by_identity
from festmeet.services.performance_extractor import PerformanceExtractor
from festmeet.services.recognition_service import RecognitionService
from festmeet.services.reference_lineup import ReferenceLineup
from festmeet.utils.errors import RecognitionError
from festmeet.utils.festival_clock import CLOCK_DAY_START_HOUR, sort_by_festival_clock
from festmeet.utils.logging import get_logger
from festmeet.utils.text_normalizer import normalize_recognized_text

EMPTY_EXTRACTION_MESSAGE = (
    "No valid set times could be extracted from the image. Try a clearer screenshot."
)


class ScheduleIngestionPipeline:
    """Turns a batch of schedule screenshots into a merged performance list.

    Parameters
    ----------
    recognizer:
        A :class:`RecognitionService` or a single recognition provider.
    extractor:
        Performance extractor; the default strategy chain when omitted.
    progress_tracker:
        Receives overall progress per session; a private tracker is used
        when omitted.
    reference_lineup:
        Optional known lineup used to correct recognized artist names.
    clock_day_start_hour:
        Start of the festival clock used to order the result.
    """

    def __init__(
        self,
        recognizer: RecognitionService | IRecognitionProvider | None = None,
        extractor: PerformanceExtractor | None = None,
        progress_tracker: ProgressTracker | None = None,
        reference_lineup: ReferenceLineup | None = None,
        clock_day_start_hour: int = CLOCK_DAY_START_HOUR,
    ) -> None:
        self._recognizer = recognizer
        self._extractor = extractor or PerformanceExtractor()
        self._progress = progress_tracker or ProgressTracker()
        self._lineup = reference_lineup
        self._clock_day_start_hour = clock_day_start_hour
        self._logger = get_logger(__name__)

    @property
    def progress_tracker(self) -> ProgressTracker:
        return self._progress

    @property
    def reference_lineup(self) -> ReferenceLineup | None:
        return self._lineup

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract_from_text(self, raw_text: str, nominal_day: date | None = None) -> list[Performance]:
        """Normalize recognized text and extract performances from it."""
        performances = self._extractor.extract(normalize_recognized_text(raw_text), nominal_day)
        if self._lineup is not None:
            performances = self._lineup.correct_all(performances)
        return performances

    async def ingest_images(
        self,
        owner_name: str,
        images: Sequence[ScheduleImage],
        existing: Iterable[Performance] | None = None,
        nominal_day: date | None = None,
        session_id: str | None = None,
    ) -> IngestionReport:
        """Recognize, extract and merge every image for *owner_name*.

        Parameters
        ----------
        owner_name:
            Whose schedule the screenshots show.
        images:
            Screenshots, processed in the given order.
        existing:
            Performances already held for this person; new ones merge into
            them.
        nominal_day:
            Date clock readings are placed on; defaults to today.
        session_id:
            Progress session key; defaults to *owner_name*.

        Raises
        ------
        RuntimeError
            If the pipeline was built without a recognizer.
        """
        if self._recognizer is None:
            raise RuntimeError("ScheduleIngestionPipeline has no recognizer configured")

        session = session_id or owner_name
        total = len(images)
        merged: list = list(existing or [])
        outcomes: list[ImageOutcome] = []

        await self._progress.update(session, IngestionPhase.RECOGNITION, 0.0, f"Reading {total} image(s)")

        for index, image in enumerate(images):

            async def on_image_progress(percent: float, _index: int = index) -> None:
                overall = (_index + percent / 100.0) / total * 100.0
                await self._progress.update(
                    session,
                    IngestionPhase.RECOGNITION,
                    overall,
                    f"Reading image {_index + 1} of {total}",
                )

            try:
                result = await self._recognizer.recognize(image, on_image_progress)
            except RecognitionError as exc:
                self._logger.warning(
                    "image_recognition_failed",
                    owner=owner_name,
                    source=image.filename,
                    error=str(exc),
                )
                outcomes.append(ImageOutcome(source=image.filename, error=str(exc)))
                continue

            await self._progress.update(
                session,
                IngestionPhase.EXTRACTION,
                (index + 1) / total * 100.0,
                f"Extracting sets from image {index + 1} of {total}",
            )
            merged, outcome = self._merge_text(merged, image.filename, result.raw_text, nominal_day)
            outcomes.append(outcome)

        return await self._finish(session, owner_name, merged, outcomes)

    async def ingest_text(
        self,
        owner_name: str,
        sources: Sequence[tuple[str, str]],
        existing: Iterable[Performance] | None = None,
        nominal_day: date | None = None,
        session_id: str | None = None,
    ) -> IngestionReport:
        """Extract and merge already-recognized text.

        *sources* holds ``(source_name, text)`` pairs, processed in order.
        """
        session = session_id or owner_name
        total = len(sources)
        merged: list = list(existing or [])
        outcomes: list[ImageOutcome] = []

        for index, (source, text) in enumerate(sources):
            merged, outcome = self._merge_text(merged, source, text, nominal_day)
            outcomes.append(outcome)
            await self._progress.update(
                session,
                IngestionPhase.EXTRACTION,
                (index + 1) / total * 100.0,
                f"Extracted sets from {index + 1} of {total} source(s)",
            )

        return await self._finish(session, owner_name, merged, outcomes)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _merge_text(
        self,
        merged: list,
        source: str,
        text: str,
        nominal_day: date | None,
    ) -> tuple[list, ImageOutcome]:
        performances = self.extract_from_text(text, nominal_day)
        if not performances:
            self._logger.info("image_extraction_empty", source=source)
            return merged, ImageOutcome(source=source, message=EMPTY_EXTRACTION_MESSAGE)

        merged = deduplicate_performances(merged, performances)
        self._logger.info(
            "image_ingested",
            source=source,
            extracted=len(performances),
            merged_total=len(merged),
        )
        return merged, ImageOutcome(source=source, extracted_count=len(performances))

    async def _finish(
        self,
        session: str,
        owner_name: str,
        merged: list,
        outcomes: list[ImageOutcome],
    ) -> IngestionReport:
        await self._progress.update(session, IngestionPhase.MERGE, 100.0, "Merging sets")
        performances = sort_by_festival_clock(unique_by_identity(merged), self._clock_day_start_hour)
        report = IngestionReport(owner_name=owner_name, performances=performances, outcomes=outcomes)
        await self._progress.update(
            session,
            IngestionPhase.COMPLETE,
            100.0,
            f"{len(performances)} set(s) from {len(outcomes)} source(s)",
        )
        self._logger.info(
            "ingestion_complete",
            owner=owner_name,
            performances=len(performances),
            failed=len(report.failed_sources),
            empty=len(report.empty_sources),
        )
        return report
