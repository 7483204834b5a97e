"""
Custom exceptions for the question paper solver.

Every failure the pipeline can report is one of these. Stages catch the
errors raised by their capabilities (OCR engine, PDF parser, language
model) and re-raise them as one of the types below with a message that
says what went wrong.
"""

from typing import Any, Optional

from paper_solver.models import ContentType


class PaperSolverError(Exception):
    """Base exception for all solver-specific errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Request Exceptions
# =============================================================================


class RequestValidationError(PaperSolverError):
    """Request payload failed schema validation."""

    def __init__(self, errors: list[dict[str, Any]], message: str = "Invalid input data") -> None:
        """Initialize with the per-field error list."""
        super().__init__(message, {"errors": errors})
        self.errors = errors


class MissingFileError(PaperSolverError):
    """No file was attached to an upload request."""

    def __init__(self) -> None:
        super().__init__("No file uploaded")


class UnsupportedFileTypeError(PaperSolverError):
    """Uploaded file has a content type with no extractor."""

    def __init__(self, content_type: Optional[str]) -> None:
        """Initialize with the rejected content type."""
        labels = [ct.label for ct in ContentType]
        message = (
            f"Unsupported file type. Please upload {', '.join(labels[:-1])}, or {labels[-1]} files."
        )
        super().__init__(message, {"content_type": content_type})
        self.content_type = content_type


# =============================================================================
# Document Exceptions
# =============================================================================


class InvalidDocumentError(PaperSolverError):
    """Document failed a structural or size check before extraction."""

    pass


class DocumentTooLargeError(InvalidDocumentError):
    """Document exceeds the maximum upload size."""

    def __init__(self, file_size: int, max_size: int, filename: str) -> None:
        """Initialize with size information."""
        message = (
            f"File '{filename}' size ({file_size} bytes) exceeds maximum ({max_size} bytes)"
        )
        super().__init__(
            message, {"file_size": file_size, "max_size": max_size, "filename": filename}
        )


class CorruptedDocumentError(InvalidDocumentError):
    """Document bytes are not a readable file of the declared type."""

    pass


# =============================================================================
# Extraction Exceptions
# =============================================================================


class ExtractionError(PaperSolverError):
    """The extraction capability could not produce text."""

    pass


class OCRError(ExtractionError):
    """Error during OCR processing."""

    pass


class PDFExtractionError(ExtractionError):
    """Error during PDF text extraction."""

    pass


class EmptyExtractionError(PaperSolverError):
    """Extraction succeeded but produced no usable text."""

    def __init__(self) -> None:
        super().__init__("No text could be extracted from the uploaded file")


# =============================================================================
# Generation Exceptions
# =============================================================================


class InvalidInputError(PaperSolverError):
    """Empty question text reached the solution generator."""

    pass


class GenerationError(PaperSolverError):
    """The language model failed to produce solutions."""

    pass


class EmptyGenerationError(GenerationError):
    """The language model call returned without any text."""

    def __init__(self) -> None:
        super().__init__("No solution generated from AI model")


# =============================================================================
# Processing Exceptions
# =============================================================================


class ProcessingTimeoutError(PaperSolverError):
    """A pipeline stage did not finish within its configured time."""

    def __init__(self, operation: str, timeout: float) -> None:
        """Initialize with timeout information."""
        message = f"Operation '{operation}' timed out after {timeout:g} seconds"
        super().__init__(message, {"operation": operation, "timeout": timeout})


class ProcessingError(PaperSolverError):
    """Unanticipated failure caught at the pipeline boundary."""

    pass


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(PaperSolverError):
    """Configuration error."""

    pass


class MissingConfigurationError(ConfigurationError):
    """Required configuration missing."""

    def __init__(self, config_name: str) -> None:
        """Initialize with config name."""
        message = f"Required configuration '{config_name}' is missing"
        super().__init__(message, {"config_name": config_name})
