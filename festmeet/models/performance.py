"""Performance and schedule models for the festmeet pipeline.

Defines Pydantic v2 models for a single scheduled set and for one person's
schedule.  All models use frozen config; a schedule change produces a new
``Schedule`` rather than mutating an existing one.

These models sit between the extraction and discovery stages:
    1. Recognized text is parsed          → Performance records
    2. Records from every upload merge    → one Schedule per person
    3. Schedules feed the meetup engine   → MeetupCandidate list
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

# Set durations are rarely recognized from screenshots, so wherever a
# duration is needed and none is known a set is assumed to last one hour.
ASSUMED_SET_DURATION = timedelta(hours=1)

IdentityKey = tuple[str, str, datetime]


def normalize_identity_text(value: str) -> str:
    """Lowercase and trim a name for identity comparison."""
    return value.strip().lower()


def to_local_naive(value: datetime) -> datetime:
    """Express an offset-aware timestamp as naive local wall-clock time.

    Browser clients store ISO strings in UTC (``...Z``) while recognized and
    typed-in times are naive local readings; every timestamp is held in the
    naive form so the two compare.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class Performance(BaseModel):
    """A scheduled artist appearance on a stage.

    ``start`` is authoritative.  ``end`` is only present when it was read
    from a time range or typed in; :attr:`effective_end` fills the gap
    with the one-hour assumption.
    """

    model_config = ConfigDict(frozen=True)

    artist: str
    stage: str = ""
    start: datetime
    end: datetime | None = None

    @field_validator("start", "end")
    @classmethod
    def _naive_local_time(cls, value: datetime | None) -> datetime | None:
        return None if value is None else to_local_naive(value)

    @field_validator("artist")
    @classmethod
    def _artist_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("artist must not be blank")
        return value

    @model_validator(mode="after")
    def _end_not_before_start(self) -> Performance:
        if self.end is not None and self.end < self.start:
            raise ValueError("end must not precede start")
        return self

    @property
    def effective_end(self) -> datetime:
        return self.end if self.end is not None else self.start + ASSUMED_SET_DURATION

    @property
    def identity_key(self) -> IdentityKey:
        """Identity used for deduplication and common-set detection.

        Casing and surrounding whitespace of artist and stage are ignored;
        the start time is truncated to the minute.
        """
        return (
            normalize_identity_text(self.artist),
            normalize_identity_text(self.stage),
            self.start.replace(second=0, microsecond=0),
        )


class Schedule(BaseModel):
    """One contributor's performances, unique by identity and chronological.

    Accepts the ``name``/``sets`` keys used by the browser client as well as
    ``owner_name``/``performances``.  When two entries share an identity the
    later one wins.
    """

    model_config = ConfigDict(frozen=True)

    owner_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("owner_name", "name"),
    )
    performances: list[Performance] = Field(
        default_factory=list,
        validation_alias=AliasChoices("performances", "sets"),
    )

    @field_validator("performances")
    @classmethod
    def _unique_and_chronological(cls, value: list[Performance]) -> list[Performance]:
        by_identity: dict[IdentityKey, Performance] = {}
        for performance in value:
            by_identity[performance.identity_key] = performance
        return sorted(by_identity.values(), key=lambda p: p.start)

    @property
    def identity_keys(self) -> set[IdentityKey]:
        return {p.identity_key for p in self.performances}
