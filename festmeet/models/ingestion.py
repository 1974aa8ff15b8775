"""Ingestion run models: phases, per-image outcomes and the run report.

An ingestion run turns a batch of screenshots for one person into a merged
performance list.  Each image gets an ``ImageOutcome`` so a failed or empty
image is reported without discarding what earlier images produced.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from festmeet.models.performance import Performance


class IngestionPhase(str, Enum):  # noqa: UP042 StrEnum requires Python 3.11+
    """Phases of one schedule-ingestion run, in order."""

    PENDING = "PENDING"
    RECOGNITION = "RECOGNITION"
    EXTRACTION = "EXTRACTION"
    MERGE = "MERGE"
    COMPLETE = "COMPLETE"


class ImageOutcome(BaseModel):
    """What happened to a single image during ingestion.

    ``error`` is set when recognition failed; ``message`` carries the
    user-facing hint when recognition worked but nothing was extracted.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    extracted_count: int = 0
    error: str | None = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.extracted_count > 0


class IngestionReport(BaseModel):
    """Merged result of ingesting every image for one person."""

    model_config = ConfigDict(frozen=True)

    owner_name: str
    performances: list[Performance] = Field(default_factory=list)
    outcomes: list[ImageOutcome] = Field(default_factory=list)

    @property
    def failed_sources(self) -> list[str]:
        return [o.source for o in self.outcomes if o.error is not None]

    @property
    def empty_sources(self) -> list[str]:
        return [o.source for o in self.outcomes if o.error is None and o.extracted_count == 0]
