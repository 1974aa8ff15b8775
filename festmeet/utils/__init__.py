"""Utility modules for festmeet.

Available utility modules (re-exported here for convenience):

- **errors** -- Exception hierarchy rooted at FestmeetError; only
  recognition failures cross component boundaries.
- **festival_clock** -- Festival-day windows and the 08:00-based sort key.
- **image_preprocessor** -- Pillow preprocessing of schedule screenshots
  (grayscale, dark-mode inversion, resize, contrast).
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- Cleanup of recognized text, artist-name cleaning
  and fuzzy matching.
- **schedule_patterns** (not re-exported here) -- Time, range and stage
  patterns plus meridiem resolution used by the extraction strategies.
"""

# -- Domain exception hierarchy --------------------------------------------
from festmeet.utils.errors import (
    ConfigurationError,
    FestmeetError,
    ManualEntryError,
    ProviderUnavailableError,
    RecognitionError,
)

# -- Festival-day arithmetic -----------------------------------------------
from festmeet.utils.festival_clock import (
    festival_day_of,
    festival_sort_minutes,
    festival_window,
    sort_by_festival_clock,
)

# -- Image preprocessing for recognition -----------------------------------
from festmeet.utils.image_preprocessor import ScreenshotPreprocessor

# -- Structured logging setup ----------------------------------------------
from festmeet.utils.logging import configure_logging, get_logger

# -- Text normalization ----------------------------------------------------
from festmeet.utils.text_normalizer import (
    clean_artist_name,
    fuzzy_match,
    normalize_recognized_text,
    title_case_name,
)

__all__ = [
    "ConfigurationError",
    "FestmeetError",
    "ManualEntryError",
    "ProviderUnavailableError",
    "RecognitionError",
    "ScreenshotPreprocessor",
    "clean_artist_name",
    "configure_logging",
    "festival_day_of",
    "festival_sort_minutes",
    "festival_window",
    "fuzzy_match",
    "get_logger",
    "normalize_recognized_text",
    "sort_by_festival_clock",
    "title_case_name",
]
