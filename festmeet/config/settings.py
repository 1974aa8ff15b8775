"""Application settings loaded from environment variables via pydantic-settings.

Settings are read from two sources, highest priority first:

  1. Environment variables, prefixed ``FESTMEET_`` (e.g.
     ``FESTMEET_MEETUP_LEAD_MINUTES=20``).
  2. A ``.env`` file in the working directory, same names.

Defaults apply when neither source sets a field.  ``APP_ENV`` and
``LOG_LEVEL`` are also accepted without the prefix, matching what the
logging setup reads.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """festmeet application settings."""

    model_config = SettingsConfigDict(
        env_prefix="FESTMEET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # === App Config ===
    app_env: str = Field(
        default="development",
        validation_alias=AliasChoices("FESTMEET_APP_ENV", "APP_ENV"),
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("FESTMEET_LOG_LEVEL", "LOG_LEVEL"),
    )

    # === Recognition ===
    # Empty = rely on tesseract being on PATH.
    tesseract_cmd: str = ""
    ocr_char_whitelist: str = (
        "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789:. -@&"
    )
    ocr_page_segmentation_mode: int = Field(default=3, ge=0, le=13)
    ocr_min_confidence: float = Field(default=0.6, ge=0.0, le=1.0)

    # === Meetup discovery ===
    meetup_lead_minutes: int = Field(default=15, gt=0)
    meetup_min_overlap_minutes: int = Field(default=15, gt=0)
    meetup_max_window_minutes: int = Field(default=60, gt=0)
    meetup_max_candidates: int = Field(default=8, ge=1)

    # === Festival day ===
    festival_day_start_hour: int = Field(default=12, ge=0, le=23)
    festival_day_end_hour: int = Field(default=6, ge=0, le=23)
    festival_clock_day_start_hour: int = Field(default=8, ge=0, le=23)

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"
