"""
PDF text extraction using PyMuPDF.

Only the text layer is read. Scanned PDFs without one yield empty text,
which the pipeline reports as an empty extraction.
"""

import asyncio
from typing import Optional

import fitz  # PyMuPDF

from paper_solver.extraction.base import (
    Extractor,
    PDFTextParser,
    require_non_empty,
)
from paper_solver.models import Artifact, ContentType
from paper_solver.utils.errors import CorruptedDocumentError, PDFExtractionError
from paper_solver.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF-"
# The header may follow a little leading junk; readers tolerate up to 1KB
HEADER_SEARCH_BYTES = 1024


class PyMuPDFTextParser:
    """PDF text capability backed by PyMuPDF."""

    def parse(self, pdf_bytes: bytes) -> str:
        try:
            with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
                if doc.needs_pass:
                    raise PDFExtractionError("PDF is password protected")

                pages = [page.get_text() for page in doc]
                logger.debug(f"Read text layer from {len(pages)} pages")
                return "\n".join(pages)
        except fitz.FileDataError as e:
            raise PDFExtractionError(f"PDF file is corrupted: {e}")


class PDFExtractor(Extractor):
    """Extract the text layer of PDF documents."""

    content_types = (ContentType.PDF,)

    def __init__(self, max_size_bytes: int, parser: Optional[PDFTextParser] = None) -> None:
        """
        Initialize the PDF extractor.

        Args:
            max_size_bytes: Largest accepted PDF
            parser: PDF text capability (defaults to PyMuPDF)
        """
        super().__init__(max_size_bytes)
        self.parser = parser or PyMuPDFTextParser()

    def _validate_content(self, artifact: Artifact) -> None:
        require_non_empty(artifact, "PDF")

        if PDF_MAGIC not in artifact.data[:HEADER_SEARCH_BYTES]:
            raise CorruptedDocumentError(
                f"Invalid PDF file '{artifact.filename}': missing PDF header",
                {"filename": artifact.filename},
            )

    @log_performance
    async def extract(self, data: bytes) -> str:
        try:
            text = await asyncio.to_thread(self.parser.parse, data)
        except PDFExtractionError as e:
            raise PDFExtractionError(f"Failed to extract text from PDF: {e.message}", e.details)
        except Exception as e:
            raise PDFExtractionError(f"Failed to extract text from PDF: {e}")

        logger.info(f"PDF text layer has {len(text)} characters")
        return text
