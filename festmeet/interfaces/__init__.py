"""Abstract contracts for swappable festmeet components.

- **IRecognitionProvider** -- reads the text of a schedule screenshot.
- **IExtractionStrategy** -- turns normalized text into performances for one
  family of schedule layouts.
"""

from festmeet.interfaces.extraction_strategy import IExtractionStrategy
from festmeet.interfaces.recognition_provider import IRecognitionProvider, ProgressCallback

__all__ = ["IExtractionStrategy", "IRecognitionProvider", "ProgressCallback"]
