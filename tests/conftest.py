"""Shared pytest fixtures for the festmeet test suite."""

from __future__ import annotations

import io
from collections.abc import Callable
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from festmeet.models.performance import Performance, Schedule
from festmeet.models.recognition import RecognitionResult, ScheduleImage
from festmeet.services.reference_lineup import ReferenceLineup

FESTIVAL_DAY = date(2025, 5, 16)

# One evening of a real festival lineup, as published in the app.
LINEUP_ENTRIES: list[dict[str, str]] = [
    {"artist": "Nobodies King", "stage": "Cyberian Stage", "start": "14:00"},
    {"artist": "Jeanie b2b Vampa", "stage": "Forbidden Stage", "start": "14:45"},
    {"artist": "Andromedik", "stage": "Mystic Stage", "start": "16:00"},
    {"artist": "Level Up", "stage": "Forbidden Stage", "start": "17:30"},
    {"artist": "Ray Volpe", "stage": "Forbidden Stage", "start": "18:30"},
    {"artist": "Wooli", "stage": "Cyberian Stage", "start": "20:00"},
    {"artist": "SLANDER B2B Svdden Death", "stage": "Forbidden Stage", "start": "21:30"},
    {"artist": "Jade Cicada", "stage": "Cyberian Stage", "start": "22:00"},
]


def at(hour: int, minute: int = 0, day: date = FESTIVAL_DAY) -> datetime:
    """Datetime on the test festival day; hours below 8 fall on the next morning."""
    moment = datetime(day.year, day.month, day.day, hour, minute)
    if hour < 8:
        moment += timedelta(days=1)
    return moment


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def festival_day() -> date:
    return FESTIVAL_DAY


@pytest.fixture
def make_performance() -> Callable[..., Performance]:
    """Factory: ``make_performance("Wooli", "Cyberian Stage", 20)``."""

    def _make(artist: str, stage: str, hour: int, minute: int = 0) -> Performance:
        return Performance(artist=artist, stage=stage, start=at(hour, minute))

    return _make


@pytest.fixture
def lineup_performances() -> list[Performance]:
    """The reference lineup as performances on the test festival day."""
    performances = []
    for entry in LINEUP_ENTRIES:
        hour, minute = (int(part) for part in entry["start"].split(":"))
        performances.append(
            Performance(artist=entry["artist"], stage=entry["stage"], start=at(hour, minute))
        )
    return performances


@pytest.fixture
def reference_lineup() -> ReferenceLineup:
    return ReferenceLineup(LINEUP_ENTRIES)


@pytest.fixture
def two_friends_sharing_wooli(make_performance: Callable[..., Performance]) -> list[Schedule]:
    """Two schedules that both hold Wooli at Cyberian Stage, 20:00."""
    return [
        Schedule(
            owner_name="Alex",
            performances=[make_performance("Wooli", "Cyberian Stage", 20)],
        ),
        Schedule(
            owner_name="Sam",
            performances=[make_performance("Wooli", "Cyberian Stage", 20)],
        ),
    ]


@pytest.fixture
def insomniac_screenshot_text() -> str:
    """Recognized text of an app screenshot: status bar, header, three sets."""
    return (
        "9:41 LTE\n"
        "LINEUP & SCHEDULE\n"
        "Nobodies King\n"
        "2:00 PM\n"
        "Cyberian Stage\n"
        "Jeanie b2b Vampa\n"
        "2:45PM\n"
        "Forbidden Stage\n"
        "Andromedik\n"
        "4:00 p.m.\n"
        "Mystic Stage\n"
    )


@pytest.fixture
def sample_png_bytes() -> bytes:
    """A small dark-mode style PNG with some text drawn on it."""
    image = Image.new("RGB", (400, 200), color=(10, 10, 30))
    draw = ImageDraw.Draw(image)
    draw.text((20, 40), "Wooli", fill=(255, 255, 255))
    draw.text((20, 80), "8:00 PM", fill=(255, 255, 255))
    draw.text((20, 120), "Cyberian Stage", fill=(255, 255, 255))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def sample_schedule_image(sample_png_bytes: bytes) -> ScheduleImage:
    return ScheduleImage.from_bytes(sample_png_bytes, "alex-1.png", "image/png")


@pytest.fixture
def make_recognition_result() -> Callable[..., RecognitionResult]:
    def _make(raw_text: str, confidence: float = 0.9, provider: str = "tesseract") -> RecognitionResult:
        return RecognitionResult(
            raw_text=raw_text,
            confidence=confidence,
            provider_used=provider,
            processing_time=0.1,
        )

    return _make
