"""
Extraction dispatch by content type.

The dispatcher owns a strategy table with exactly one extractor for each
member of ``ContentType``. For every artifact it admits the size, looks up
the extractor, validates and extracts. Unknown content types are rejected
before any extractor runs.
"""

from typing import Dict, Iterable, Optional

from paper_solver.config import Settings, get_settings
from paper_solver.extraction.base import Extractor, OCREngine, PDFTextParser
from paper_solver.extraction.image import ImageExtractor, TesseractOCREngine
from paper_solver.extraction.pdf import PDFExtractor
from paper_solver.extraction.text import TextExtractor
from paper_solver.models import Artifact, ContentType
from paper_solver.utils.errors import (
    ConfigurationError,
    DocumentTooLargeError,
    UnsupportedFileTypeError,
)
from paper_solver.utils.logging import get_logger

logger = get_logger(__name__)


class ExtractionDispatcher:
    """Route artifacts to the extractor registered for their content type."""

    def __init__(self, extractors: Iterable[Extractor], max_size_bytes: int) -> None:
        """
        Build the strategy table.

        Args:
            extractors: Extractors covering every ContentType exactly once
            max_size_bytes: Upload size limit checked before dispatch

        Raises:
            ConfigurationError: If a content type is missing or claimed twice
        """
        self.max_size_bytes = max_size_bytes
        self._strategies: Dict[ContentType, Extractor] = {}

        for extractor in extractors:
            for content_type in extractor.content_types:
                if content_type in self._strategies:
                    raise ConfigurationError(
                        f"Content type {content_type.value} has more than one extractor",
                        {"content_type": content_type.value},
                    )
                self._strategies[content_type] = extractor

        missing = [ct.value for ct in ContentType if ct not in self._strategies]
        if missing:
            raise ConfigurationError(
                f"No extractor registered for: {', '.join(missing)}",
                {"missing": missing},
            )

    @property
    def supported_types(self) -> list[ContentType]:
        return list(self._strategies)

    def extractor_for(self, content_type: ContentType) -> Extractor:
        return self._strategies[content_type]

    def resolve(self, artifact: Artifact) -> ContentType:
        """
        Return the content type the artifact will be extracted as.

        Raises:
            UnsupportedFileTypeError: If the declared type has no extractor
        """
        content_type = artifact.resolved_type
        if content_type is None or content_type not in self.supported_types:
            raise UnsupportedFileTypeError(artifact.content_type)
        return content_type

    async def extract(self, artifact: Artifact) -> str:
        """
        Extract text from an artifact with the matching strategy.

        Raises:
            UnsupportedFileTypeError: Declared type is not accepted
            DocumentTooLargeError: Artifact is over the size limit
            InvalidDocumentError: Artifact failed format validation
            ExtractionError: The extraction capability failed
        """
        content_type = self.resolve(artifact)

        if artifact.size > self.max_size_bytes:
            raise DocumentTooLargeError(
                file_size=artifact.size,
                max_size=self.max_size_bytes,
                filename=artifact.filename,
            )

        extractor = self.extractor_for(content_type)
        logger.info(
            f"Dispatching {artifact.filename} ({content_type.value}, {artifact.size} bytes) "
            f"to {type(extractor).__name__}"
        )

        extractor.validate(artifact)
        return await extractor.extract(artifact.data)


def create_extraction_dispatcher(
    settings: Optional[Settings] = None,
    ocr_engine: Optional[OCREngine] = None,
    pdf_parser: Optional[PDFTextParser] = None,
) -> ExtractionDispatcher:
    """Create a dispatcher with the default extractors."""
    settings = settings or get_settings()
    max_size = settings.max_upload_size_bytes

    return ExtractionDispatcher(
        extractors=[
            PDFExtractor(max_size, parser=pdf_parser),
            ImageExtractor(
                max_size,
                engine=ocr_engine or TesseractOCREngine(language=settings.ocr_language),
            ),
            TextExtractor(max_size),
        ],
        max_size_bytes=max_size,
    )
