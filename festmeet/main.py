"""festmeet service wiring.

Builds the recognition, extraction and ingestion services from the merged
configuration (``config/config.yaml`` plus environment overrides) so the CLI
and any embedding application share one construction path.
"""

from __future__ import annotations

from typing import Any

from festmeet.config.loader import load_config
from festmeet.interfaces.recognition_provider import IRecognitionProvider
from festmeet.models.meetup import MeetupPolicy
from festmeet.pipeline.ingestion import ScheduleIngestionPipeline
from festmeet.pipeline.progress_tracker import ProgressTracker
from festmeet.providers.recognition.tesseract_provider import (
    DEFAULT_CHAR_WHITELIST,
    DEFAULT_PAGE_SEGMENTATION_MODE,
    TesseractRecognitionProvider,
)
from festmeet.services.performance_extractor import PerformanceExtractor, build_strategies
from festmeet.services.recognition_service import RecognitionService
from festmeet.services.reference_lineup import ReferenceLineup
from festmeet.utils.errors import ConfigurationError


def _build_recognition_providers(section: dict[str, Any]) -> list[IRecognitionProvider]:
    providers: list[IRecognitionProvider] = []
    for name in section.get("providers") or ["tesseract"]:
        if name == "tesseract":
            providers.append(
                TesseractRecognitionProvider(
                    char_whitelist=section.get("char_whitelist") or DEFAULT_CHAR_WHITELIST,
                    page_segmentation_mode=int(
                        section.get("page_segmentation_mode", DEFAULT_PAGE_SEGMENTATION_MODE)
                    ),
                    tesseract_cmd=section.get("tesseract_cmd") or None,
                )
            )
        else:
            raise ConfigurationError(f"Unknown recognition provider: {name}")
    return providers


def build_services(
    config: dict[str, Any] | None = None,
    reference_lineup: ReferenceLineup | None = None,
) -> dict[str, Any]:
    """Construct festmeet services with injected dependencies.

    Parameters
    ----------
    config:
        Merged configuration; loaded via :func:`load_config` when omitted.
    reference_lineup:
        Optional known lineup used to correct recognized artist names.

    Returns
    -------
    dict
        Service instances keyed by role name.

    Raises
    ------
    ConfigurationError
        If a configured provider or strategy name is unknown.
    """
    config = config if config is not None else load_config()
    recognition_section = config.get("recognition", {}) or {}
    extraction_section = config.get("extraction", {}) or {}

    policy = MeetupPolicy.from_config(config)
    recognition_service = RecognitionService(
        providers=_build_recognition_providers(recognition_section),
        min_confidence=float(recognition_section.get("min_confidence", 0.6)),
    )

    strategy_names = extraction_section.get("strategies")
    extractor = PerformanceExtractor(
        strategies=build_strategies(strategy_names) if strategy_names else None,
    )
    progress_tracker = ProgressTracker()
    ingestion = ScheduleIngestionPipeline(
        recognizer=recognition_service,
        extractor=extractor,
        progress_tracker=progress_tracker,
        reference_lineup=reference_lineup,
        clock_day_start_hour=policy.clock_day_start_hour,
    )

    return {
        "recognition_service": recognition_service,
        "extractor": extractor,
        "progress_tracker": progress_tracker,
        "ingestion": ingestion,
        "policy": policy,
        "config": config,
    }
