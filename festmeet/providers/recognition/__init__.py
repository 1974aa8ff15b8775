"""Recognition provider implementations for schedule screenshots.

    TesseractRecognitionProvider - local Google Tesseract via pytesseract,
    with a character whitelist tuned for set-time listings.
"""

from festmeet.providers.recognition.tesseract_provider import TesseractRecognitionProvider

__all__ = ["TesseractRecognitionProvider"]
