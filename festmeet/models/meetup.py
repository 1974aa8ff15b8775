"""Free-time and meetup models for the festmeet discovery stage.

``Gap`` is one person's contiguous free interval; ``MeetupCandidate`` is a
proposed time and place for at least two people.  ``MeetupPolicy`` carries
the tunable windows the engine works with.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Gap(BaseModel):
    """A contiguous free interval in one person's schedule.

    Bounded by the festival-day window and/or adjacent performances.  A
    leading gap has no ``preceding_artist``; a trailing gap has no
    ``following_artist``.
    """

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    preceding_artist: str | None = None
    following_artist: str | None = None
    following_stage: str | None = None

    @model_validator(mode="after")
    def _positive_length(self) -> Gap:
        if self.end <= self.start:
            raise ValueError("gap end must be after its start")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def is_internal(self) -> bool:
        """True when the gap sits between two of the owner's own sets."""
        return self.preceding_artist is not None and self.following_artist is not None


class MeetupCandidate(BaseModel):
    """A proposed window for a subset of the group to meet.

    ``is_recommended`` candidates are derived from a performance shared by
    several people; the others come from overlapping general free time and
    are lower confidence.  ``attendees`` lists who holds the anchor
    performance (recommended candidates only).
    """

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    participants: frozenset[str]
    is_recommended: bool
    anchor_artist: str | None = None
    anchor_stage: str | None = None
    attendees: frozenset[str] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def _meaningful_meetup(self) -> MeetupCandidate:
        if len(self.participants) < 2:
            raise ValueError("a meetup needs at least two participants")
        if self.end <= self.start:
            raise ValueError("meetup end must be after its start")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class MeetupPolicy(BaseModel):
    """Windows and limits used by the gap finder and meetup engine."""

    model_config = ConfigDict(frozen=True)

    # Meet this long before a shared set starts.
    lead_time: timedelta = timedelta(minutes=15)
    # Shortest general overlap worth proposing.
    min_overlap: timedelta = timedelta(minutes=15)
    # Longer overlaps are trimmed to their trailing part.
    max_window: timedelta = timedelta(minutes=60)
    max_candidates: int = Field(default=8, ge=1)
    # General overlaps are only searched below this many recommendations.
    min_recommended: int = Field(default=2, ge=0)
    festival_day_start_hour: int = Field(default=12, ge=0, le=23)
    festival_day_end_hour: int = Field(default=6, ge=0, le=23)
    clock_day_start_hour: int = Field(default=8, ge=0, le=23)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> MeetupPolicy:
        """Build a policy from the ``meetup`` section of a loaded config dict."""
        section = config.get("meetup", {}) or {}
        values: dict[str, Any] = {}
        minute_fields = {
            "lead_minutes": "lead_time",
            "min_overlap_minutes": "min_overlap",
            "max_window_minutes": "max_window",
        }
        for key, field_name in minute_fields.items():
            if section.get(key) is not None:
                values[field_name] = timedelta(minutes=int(section[key]))
        for key in (
            "max_candidates",
            "min_recommended",
            "festival_day_start_hour",
            "festival_day_end_hour",
            "clock_day_start_hour",
        ):
            if section.get(key) is not None:
                values[key] = section[key]
        return cls(**values)
