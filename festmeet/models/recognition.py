"""Schedule screenshot and recognition result models.

    1. A person submits a schedule screenshot   → ScheduleImage
    2. The recognition engine reads the image   → RecognitionResult

The raw bytes ride along in a private attribute so serialized payloads
stay small.
"""

from __future__ import annotations

import hashlib
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


class ScheduleImage(BaseModel):
    """An uploaded schedule screenshot."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    filename: str
    content_type: str = "image/png"
    file_size: int = 0
    image_hash: str = ""
    _image_data: bytes | None = PrivateAttr(default=None)

    @classmethod
    def from_bytes(
        cls, data: bytes, filename: str, content_type: str = "image/png",
    ) -> ScheduleImage:
        image = cls(
            filename=filename,
            content_type=content_type,
            file_size=len(data),
            image_hash=hashlib.sha256(data).hexdigest(),
        )
        image._image_data = data
        return image

    @property
    def image_data(self) -> bytes | None:
        """Return the raw image bytes (excluded from serialization)."""
        return self._image_data


class RecognitionResult(BaseModel):
    """Text recognized from one schedule image."""

    model_config = ConfigDict(frozen=True)

    raw_text: str
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    provider_used: str
    processing_time: float = 0.0
