"""festmeet domain models; re-exports all public model classes.

Other parts of the codebase import from ``festmeet.models`` rather than
from the individual submodules:
    - performance.py: Performance and Schedule
    - meetup.py: Gap, MeetupCandidate and the engine's MeetupPolicy
    - recognition.py: ScheduleImage and RecognitionResult
    - ingestion.py: ingestion phases, per-image outcomes, run report
"""

from __future__ import annotations

from festmeet.models.ingestion import (
    ImageOutcome,
    IngestionPhase,
    IngestionReport,
)
from festmeet.models.meetup import (
    Gap,
    MeetupCandidate,
    MeetupPolicy,
)
from festmeet.models.performance import (
    ASSUMED_SET_DURATION,
    IdentityKey,
    Performance,
    Schedule,
    normalize_identity_text,
)
from festmeet.models.recognition import (
    RecognitionResult,
    ScheduleImage,
)

__all__ = [
    # performance
    "ASSUMED_SET_DURATION",
    "IdentityKey",
    "Performance",
    "Schedule",
    "normalize_identity_text",
    # meetup
    "Gap",
    "MeetupCandidate",
    "MeetupPolicy",
    # recognition
    "RecognitionResult",
    "ScheduleImage",
    # ingestion
    "ImageOutcome",
    "IngestionPhase",
    "IngestionReport",
]
