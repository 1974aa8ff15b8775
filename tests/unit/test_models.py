"""Unit tests for festmeet domain models and the exception hierarchy."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from festmeet.models import (
    Gap,
    ImageOutcome,
    IngestionReport,
    MeetupCandidate,
    MeetupPolicy,
    Performance,
    RecognitionResult,
    Schedule,
    ScheduleImage,
)
from festmeet.utils.errors import (
    FestmeetError,
    ManualEntryError,
    RecognitionError,
)
from tests.conftest import at


# ======================================================================
# Performance
# ======================================================================


class TestPerformance:
    def test_minimal_record(self) -> None:
        performance = Performance(artist="Wooli", start=at(20))
        assert performance.stage == ""
        assert performance.end is None

    def test_blank_artist_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Performance(artist="   ", stage="Cyberian Stage", start=at(20))

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Performance(artist="Wooli", stage="Cyberian Stage", start=at(20), end=at(19))

    def test_effective_end_assumes_one_hour(self) -> None:
        assert Performance(artist="Wooli", start=at(20)).effective_end == at(21)
        assert Performance(artist="Wooli", start=at(20), end=at(20, 45)).effective_end == at(20, 45)

    def test_identity_key(self) -> None:
        performance = Performance(artist=" Wooli ", stage="CYBERIAN Stage", start=at(20).replace(second=59))
        assert performance.identity_key == ("wooli", "cyberian stage", at(20))

    def test_offset_aware_times_become_local_naive(self) -> None:
        utc_start = datetime(2025, 5, 16, 20, tzinfo=timezone.utc)
        performance = Performance.model_validate(
            {"artist": "Wooli", "start": "2025-05-16T20:00:00Z", "end": "2025-05-16T21:00:00+00:00"}
        )
        assert performance.start.tzinfo is None
        assert performance.start == utc_start.astimezone().replace(tzinfo=None)
        assert performance.end - performance.start == timedelta(hours=1)

    def test_naive_times_unchanged(self) -> None:
        assert Performance(artist="Wooli", start=at(20)).start == at(20)

    def test_frozen(self) -> None:
        performance = Performance(artist="Wooli", start=at(20))
        with pytest.raises(ValidationError):
            performance.artist = "Level Up"  # type: ignore[misc]


# ======================================================================
# Schedule
# ======================================================================


class TestSchedule:
    def test_unique_and_chronological(self) -> None:
        schedule = Schedule(
            owner_name="Alex",
            performances=[
                Performance(artist="Wooli", stage="Cyberian Stage", start=at(20)),
                Performance(artist="Nobodies King", stage="Cyberian Stage", start=at(14)),
                Performance(artist="wooli", stage="cyberian stage", start=at(20), end=at(21, 30)),
            ],
        )
        assert [p.artist for p in schedule.performances] == ["Nobodies King", "wooli"]

    def test_client_aliases(self) -> None:
        schedule = Schedule.model_validate(
            {"name": "Sam", "sets": [{"artist": "Wooli", "stage": "Cyberian Stage", "start": at(20)}]}
        )
        assert schedule.owner_name == "Sam"
        assert len(schedule.performances) == 1

    def test_blank_owner_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Schedule(owner_name="")

    def test_identity_keys(self) -> None:
        schedule = Schedule(owner_name="Alex", performances=[Performance(artist="Wooli", stage="Cyberian Stage", start=at(20))])
        assert schedule.identity_keys == {("wooli", "cyberian stage", at(20))}


# ======================================================================
# Gap / MeetupCandidate / MeetupPolicy
# ======================================================================


class TestGap:
    def test_zero_length_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Gap(start=at(15), end=at(15))

    def test_internal_needs_both_neighbours(self) -> None:
        assert Gap(start=at(15), end=at(16), preceding_artist="A", following_artist="B").is_internal
        assert not Gap(start=at(15), end=at(16), following_artist="B").is_internal

    def test_duration(self) -> None:
        assert Gap(start=at(15), end=at(17, 30)).duration == timedelta(hours=2, minutes=30)


class TestMeetupCandidate:
    def test_needs_two_participants(self) -> None:
        with pytest.raises(ValidationError):
            MeetupCandidate(start=at(19, 45), end=at(20), participants=frozenset({"Alex"}), is_recommended=True)

    def test_needs_positive_window(self) -> None:
        with pytest.raises(ValidationError):
            MeetupCandidate(start=at(20), end=at(19, 45), participants=frozenset({"Alex", "Sam"}), is_recommended=True)

    def test_defaults(self) -> None:
        candidate = MeetupCandidate(
            start=at(19, 45), end=at(20), participants=frozenset({"Alex", "Sam"}), is_recommended=False,
        )
        assert candidate.anchor_artist is None
        assert candidate.attendees == frozenset()
        assert candidate.duration == timedelta(minutes=15)


class TestMeetupPolicy:
    def test_defaults(self) -> None:
        policy = MeetupPolicy()
        assert policy.lead_time == timedelta(minutes=15)
        assert policy.min_overlap == timedelta(minutes=15)
        assert policy.max_window == timedelta(minutes=60)
        assert policy.max_candidates == 8
        assert policy.min_recommended == 2

    def test_from_config(self) -> None:
        policy = MeetupPolicy.from_config(
            {"meetup": {"lead_minutes": 30, "max_candidates": 3, "festival_day_start_hour": 14}}
        )
        assert policy.lead_time == timedelta(minutes=30)
        assert policy.max_candidates == 3
        assert policy.festival_day_start_hour == 14
        assert policy.min_overlap == timedelta(minutes=15)

    def test_from_empty_config(self) -> None:
        assert MeetupPolicy.from_config({}) == MeetupPolicy()
        assert MeetupPolicy.from_config({"meetup": None}) == MeetupPolicy()

    def test_invalid_hour_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MeetupPolicy(festival_day_start_hour=24)


# ======================================================================
# Recognition / ingestion models
# ======================================================================


class TestScheduleImage:
    def test_from_bytes(self, sample_png_bytes: bytes) -> None:
        image = ScheduleImage.from_bytes(sample_png_bytes, "alex-1.png")
        assert image.file_size == len(sample_png_bytes)
        assert image.image_hash == hashlib.sha256(sample_png_bytes).hexdigest()
        assert image.image_data == sample_png_bytes
        assert image.content_type == "image/png"

    def test_bytes_not_serialized(self, sample_schedule_image: ScheduleImage) -> None:
        dumped = sample_schedule_image.model_dump()
        assert "_image_data" not in dumped
        assert "image_data" not in dumped

    def test_unique_ids(self, sample_png_bytes: bytes) -> None:
        first = ScheduleImage.from_bytes(sample_png_bytes, "a.png")
        second = ScheduleImage.from_bytes(sample_png_bytes, "a.png")
        assert first.id != second.id


class TestRecognitionResult:
    def test_confidence_bounds(self) -> None:
        with pytest.raises(ValidationError):
            RecognitionResult(raw_text="Wooli", confidence=1.5, provider_used="tesseract")


class TestIngestionReport:
    def test_source_classification(self) -> None:
        report = IngestionReport(
            owner_name="Alex",
            outcomes=[
                ImageOutcome(source="a.png", extracted_count=3),
                ImageOutcome(source="b.png", error="[tesseract] Tesseract recognition failed"),
                ImageOutcome(source="c.png", message="No valid set times could be extracted"),
            ],
        )
        assert report.failed_sources == ["b.png"]
        assert report.empty_sources == ["c.png"]
        assert [o.succeeded for o in report.outcomes] == [True, False, False]


# ======================================================================
# Errors
# ======================================================================


class TestErrors:
    def test_provider_prefix(self) -> None:
        error = RecognitionError("Tesseract recognition failed", provider_name="tesseract")
        assert str(error) == "[tesseract] Tesseract recognition failed"
        assert error.provider_name == "tesseract"
        assert isinstance(error, FestmeetError)

    def test_plain_message(self) -> None:
        assert str(FestmeetError("boom")) == "boom"

    def test_manual_entry_field_errors_copied(self) -> None:
        flags = {"artist": True, "stage": False, "start": False}
        error = ManualEntryError("Invalid or missing fields: artist", field_errors=flags)
        flags["stage"] = True
        assert error.field_errors == {"artist": True, "stage": False, "start": False}
