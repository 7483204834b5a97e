"""
Image text extraction using Tesseract OCR.

The image is checked with Pillow before OCR runs, so truncated or
mislabelled uploads are rejected without starting the OCR engine.
"""

import asyncio
import io
from typing import Optional

import pytesseract
from PIL import Image

from paper_solver.extraction.base import Extractor, OCREngine, require_non_empty
from paper_solver.models import Artifact, ContentType
from paper_solver.utils.errors import CorruptedDocumentError, OCRError
from paper_solver.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

# Pillow format names accepted for OCR
SUPPORTED_IMAGE_FORMATS = {"PNG", "JPEG"}


class TesseractOCREngine:
    """OCR capability backed by the tesseract binary via pytesseract."""

    def __init__(self, language: str = "eng") -> None:
        self.language = language

    def recognize(self, image_bytes: bytes) -> str:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                return pytesseract.image_to_string(image, lang=self.language)
        except pytesseract.TesseractNotFoundError as e:
            raise OCRError(f"OCR engine unavailable: {e}")


class ImageExtractor(Extractor):
    """Extract text from PNG and JPEG images."""

    content_types = (ContentType.PNG, ContentType.JPEG)

    def __init__(self, max_size_bytes: int, engine: Optional[OCREngine] = None) -> None:
        """
        Initialize the image extractor.

        Args:
            max_size_bytes: Largest accepted image
            engine: OCR capability (defaults to Tesseract, English)
        """
        super().__init__(max_size_bytes)
        self.engine = engine or TesseractOCREngine()

    def _validate_content(self, artifact: Artifact) -> None:
        require_non_empty(artifact, "Image")

        try:
            with Image.open(io.BytesIO(artifact.data)) as image:
                image_format = image.format
                image.verify()
        except Exception as e:
            logger.warning(f"Rejected unreadable image {artifact.filename}: {e}")
            raise CorruptedDocumentError(
                f"Invalid image file '{artifact.filename}': {e}",
                {"filename": artifact.filename},
            )

        if image_format not in SUPPORTED_IMAGE_FORMATS:
            raise CorruptedDocumentError(
                f"Invalid image file '{artifact.filename}': "
                f"expected PNG or JPEG data, got {image_format or 'unknown format'}",
                {"filename": artifact.filename, "format": image_format},
            )

    @log_performance
    async def extract(self, data: bytes) -> str:
        try:
            text = await asyncio.to_thread(self.engine.recognize, data)
        except OCRError:
            raise
        except Exception as e:
            raise OCRError(f"Failed to extract text from image: {e}")

        logger.info(f"OCR produced {len(text)} characters")
        return text
