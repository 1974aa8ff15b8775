"""Image preprocessing for schedule screenshots.

Festival apps render their schedules as light text on dark backgrounds at
phone resolution.  Tesseract reads dark text on a light page best, with
characters at least 20-30 px tall, so screenshots are converted to
grayscale, inverted when dark, resized and contrast-boosted before
recognition.
"""

import io

from PIL import Image, ImageEnhance, ImageOps, ImageStat

# Mean grayscale level below which a screenshot is treated as dark mode.
_DARK_MODE_THRESHOLD = 128


class ScreenshotPreprocessor:
    """Prepares schedule screenshots for text recognition."""

    def prepare(self, image: Image.Image) -> Image.Image:
        """Run the full pipeline: grayscale -> invert if dark -> resize -> contrast."""
        gray = image.convert("L")
        if self.is_dark(gray):
            gray = ImageOps.invert(gray)
        gray = self.resize_for_ocr(gray)
        return self.enhance_contrast(gray)

    def prepare_bytes(self, image_bytes: bytes) -> bytes:
        """Preprocess raw image bytes and return PNG bytes."""
        image = Image.open(io.BytesIO(image_bytes))
        prepared = self.prepare(image)
        buffer = io.BytesIO()
        prepared.save(buffer, format="PNG")
        return buffer.getvalue()

    @staticmethod
    def is_dark(gray: Image.Image) -> bool:
        return ImageStat.Stat(gray).mean[0] < _DARK_MODE_THRESHOLD

    def enhance_contrast(self, image: Image.Image) -> Image.Image:
        """Stretch the histogram, then boost contrast and sharpness."""
        image = ImageOps.autocontrast(image)
        image = ImageEnhance.Contrast(image).enhance(1.5)
        return ImageEnhance.Sharpness(image).enhance(1.5)

    def resize_for_ocr(
        self, image: Image.Image, max_dim: int = 2400, min_dim: int = 1600
    ) -> Image.Image:
        """Resize so the largest dimension is between *min_dim* and *max_dim*.

        Preserves aspect ratio.  Phone screenshots are usually upscaled.

        Args:
            image: Input PIL Image.
            max_dim: Maximum allowed dimension in pixels.
            min_dim: Minimum target for the largest dimension.

        Returns:
            Resized PIL Image, or the input when already in range.
        """
        width, height = image.size
        largest = max(width, height)

        if largest < min_dim:
            scale = min_dim / largest
        elif largest > max_dim:
            scale = max_dim / largest
        else:
            return image

        return image.resize((int(width * scale), int(height * scale)), Image.LANCZOS)
