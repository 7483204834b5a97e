"""
Abstract base interface for text extractors.

An extractor turns the bytes of one artifact into plain text. It is used in
two steps: ``validate`` runs cheap structural and size checks and raises
``InvalidDocumentError``; ``extract`` performs the expensive conversion and
raises ``ExtractionError`` when the underlying capability fails.
"""

from abc import ABC, abstractmethod
from typing import Protocol

from paper_solver.models import Artifact, ContentType
from paper_solver.utils.errors import DocumentTooLargeError, InvalidDocumentError
from paper_solver.utils.logging import get_logger

logger = get_logger(__name__)


class OCREngine(Protocol):
    """Capability that reads text out of an encoded image."""

    def recognize(self, image_bytes: bytes) -> str:
        ...


class PDFTextParser(Protocol):
    """Capability that reads the text layer of a PDF."""

    def parse(self, pdf_bytes: bytes) -> str:
        ...


class Extractor(ABC):
    """
    Base class for per-content-type extractors.

    Subclasses declare the content types they handle and implement
    ``extract``. ``validate`` enforces the size limit and delegates
    format-specific checks to ``_validate_content``.
    """

    content_types: tuple[ContentType, ...] = ()

    def __init__(self, max_size_bytes: int) -> None:
        self.max_size_bytes = max_size_bytes

    def validate(self, artifact: Artifact) -> None:
        """
        Check the artifact before extraction.

        Raises:
            DocumentTooLargeError: If the artifact exceeds the size limit
            InvalidDocumentError: If the bytes fail the format checks
        """
        if artifact.size > self.max_size_bytes:
            raise DocumentTooLargeError(
                file_size=artifact.size,
                max_size=self.max_size_bytes,
                filename=artifact.filename,
            )
        self._validate_content(artifact)

    def _validate_content(self, artifact: Artifact) -> None:
        """Format-specific checks. No-op by default."""

    @abstractmethod
    async def extract(self, data: bytes) -> str:
        """
        Convert artifact bytes to text.

        Raises:
            ExtractionError: If the underlying capability fails
        """


def require_non_empty(artifact: Artifact, kind: str) -> None:
    """Reject zero-byte uploads with a message naming the expected kind."""
    if artifact.size == 0:
        raise InvalidDocumentError(
            f"{kind} file '{artifact.filename}' is empty",
            {"filename": artifact.filename},
        )
