"""Unit tests for the Tesseract recognition provider."""

from __future__ import annotations

import shlex
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytesseract
from PIL import Image

from festmeet.models.recognition import ScheduleImage
from festmeet.providers.recognition.tesseract_provider import (
    DEFAULT_CHAR_WHITELIST,
    TesseractRecognitionProvider,
    report_progress,
)
from festmeet.utils.errors import RecognitionError
from festmeet.utils.image_preprocessor import ScreenshotPreprocessor

_PROVIDER_MODULE = "festmeet.providers.recognition.tesseract_provider"

# Layout rows carry conf == -1 and no text.
_OCR_DATA = {
    "text": ["", "Nobodies", "King", "2:00", "PM", "Cyberian", "Stage"],
    "conf": [-1, 95, 90, 88, 92, 85, 91],
    "block_num": [1, 1, 1, 1, 1, 1, 1],
    "par_num": [1, 1, 1, 1, 1, 1, 1],
    "line_num": [0, 1, 1, 2, 2, 3, 3],
}


@pytest.fixture
def mock_preprocessor() -> MagicMock:
    preprocessor = MagicMock(spec=ScreenshotPreprocessor)
    preprocessor.prepare.return_value = Image.new("L", (1600, 800), 255)
    return preprocessor


class TestTesseractRecognitionProvider:
    def test_get_provider_name(self) -> None:
        assert TesseractRecognitionProvider().get_provider_name() == "tesseract"

    def test_tesseract_config(self) -> None:
        provider = TesseractRecognitionProvider(page_segmentation_mode=6)
        assert shlex.split(provider.tesseract_config) == [
            "-c",
            f"tessedit_char_whitelist={DEFAULT_CHAR_WHITELIST}",
            "--psm",
            "6",
        ]

    def test_custom_binary_path(self) -> None:
        with patch(f"{_PROVIDER_MODULE}.pytesseract") as mock_tess:
            TesseractRecognitionProvider(tesseract_cmd="/opt/tesseract/bin/tesseract")
        assert mock_tess.pytesseract.tesseract_cmd == "/opt/tesseract/bin/tesseract"

    @pytest.mark.asyncio
    async def test_recognize_rebuilds_lines(
        self, sample_schedule_image: ScheduleImage, mock_preprocessor: MagicMock,
    ) -> None:
        with patch(f"{_PROVIDER_MODULE}.pytesseract") as mock_tess:
            mock_tess.image_to_data.return_value = _OCR_DATA
            mock_tess.Output.DICT = "dict"

            provider = TesseractRecognitionProvider(preprocessor=mock_preprocessor)
            result = await provider.recognize(sample_schedule_image)

        assert result.raw_text == "Nobodies King\n2:00 PM\nCyberian Stage"
        assert result.confidence == pytest.approx(541 / 6 / 100, abs=1e-4)
        assert result.provider_used == "tesseract"
        mock_preprocessor.prepare.assert_called_once()
        _, kwargs = mock_tess.image_to_data.call_args
        assert kwargs["config"] == provider.tesseract_config

    @pytest.mark.asyncio
    async def test_recognize_reports_progress(
        self, sample_schedule_image: ScheduleImage, mock_preprocessor: MagicMock,
    ) -> None:
        reported: list[float] = []

        with patch(f"{_PROVIDER_MODULE}.pytesseract") as mock_tess:
            mock_tess.image_to_data.return_value = _OCR_DATA
            provider = TesseractRecognitionProvider(preprocessor=mock_preprocessor)
            await provider.recognize(sample_schedule_image, on_progress=reported.append)

        assert reported == [0.0, 100.0]

    @pytest.mark.asyncio
    async def test_blank_image_yields_empty_text(
        self, sample_schedule_image: ScheduleImage, mock_preprocessor: MagicMock,
    ) -> None:
        with patch(f"{_PROVIDER_MODULE}.pytesseract") as mock_tess:
            mock_tess.image_to_data.return_value = {
                "text": [""],
                "conf": [-1],
                "block_num": [0],
                "par_num": [0],
                "line_num": [0],
            }
            provider = TesseractRecognitionProvider(preprocessor=mock_preprocessor)
            result = await provider.recognize(sample_schedule_image)

        assert result.raw_text == ""
        assert result.confidence == 0.0

    @pytest.mark.asyncio
    async def test_engine_failure_raises_recognition_error(
        self, sample_schedule_image: ScheduleImage, mock_preprocessor: MagicMock,
    ) -> None:
        with patch(f"{_PROVIDER_MODULE}.pytesseract") as mock_tess:
            mock_tess.image_to_data.side_effect = RuntimeError("tesseract crashed")
            provider = TesseractRecognitionProvider(preprocessor=mock_preprocessor)

            with pytest.raises(RecognitionError, match="tesseract crashed") as exc_info:
                await provider.recognize(sample_schedule_image)

        assert exc_info.value.provider_name == "tesseract"

    @pytest.mark.asyncio
    async def test_missing_image_data_raises(self) -> None:
        image = ScheduleImage(filename="empty.png")
        with pytest.raises(RecognitionError, match="No image data"):
            await TesseractRecognitionProvider().recognize(image)

    def test_is_available_true(self) -> None:
        with patch(f"{_PROVIDER_MODULE}.pytesseract.get_tesseract_version", return_value="5.3.0"):
            assert TesseractRecognitionProvider().is_available() is True

    def test_is_available_false_when_binary_missing(self) -> None:
        with patch(
            f"{_PROVIDER_MODULE}.pytesseract.get_tesseract_version",
            side_effect=pytesseract.TesseractNotFoundError(),
        ):
            assert TesseractRecognitionProvider().is_available() is False


class TestReportProgress:
    @pytest.mark.asyncio
    async def test_sync_callback(self) -> None:
        callback = MagicMock(return_value=None)
        await report_progress(callback, 50.0)
        callback.assert_called_once_with(50.0)

    @pytest.mark.asyncio
    async def test_async_callback(self) -> None:
        callback = AsyncMock()
        await report_progress(callback, 50.0)
        callback.assert_awaited_once_with(50.0)

    @pytest.mark.asyncio
    async def test_no_callback(self) -> None:
        await report_progress(None, 50.0)
