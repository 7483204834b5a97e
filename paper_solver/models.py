"""
Core data models for the question paper solver.

Pydantic models for the uploaded artifact, the request payloads and the
response envelopes. Envelopes serialise with the camelCase keys clients
expect (``extractedText``, ``processedAt`` ...).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Enums
# =============================================================================


class ContentType(str, Enum):
    """Content types with an extractor. The set is closed."""

    PDF = "application/pdf"
    PNG = "image/png"
    JPEG = "image/jpeg"
    TEXT = "text/plain"

    @property
    def label(self) -> str:
        """Short name shown to users."""
        return _LABELS[self]

    @classmethod
    def resolve(cls, content_type: Optional[str]) -> Optional["ContentType"]:
        """
        Map a declared MIME type onto a supported content type.

        Parameters such as ``; charset=utf-8`` and letter case are ignored,
        and common JPEG aliases are accepted. Returns None for anything
        else.
        """
        if not content_type:
            return None
        mime = content_type.split(";", 1)[0].strip().lower()
        mime = _ALIASES.get(mime, mime)
        try:
            return cls(mime)
        except ValueError:
            return None


_LABELS = {
    ContentType.PDF: "PDF",
    ContentType.PNG: "PNG",
    ContentType.JPEG: "JPG",
    ContentType.TEXT: "TXT",
}

_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "image/x-png": "image/png",
}


class JobState(str, Enum):
    """Status values reported by the job status endpoint."""

    COMPLETED = "completed"


# =============================================================================
# Input Models
# =============================================================================


class Artifact(BaseModel):
    """One uploaded document, alive for the duration of a single request."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., repr=False, description="Raw file bytes")
    content_type: Optional[str] = Field(None, description="Declared MIME type")
    filename: str = Field("upload", description="Original filename")

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def resolved_type(self) -> Optional[ContentType]:
        return ContentType.resolve(self.content_type)


class ProcessTextRequest(BaseModel):
    """Body of a process-text request."""

    text: str = Field(..., min_length=1, description="Question paper text")
    filename: Optional[str] = Field(None, description="Optional display name")


# =============================================================================
# Response Models
# =============================================================================


class Envelope(BaseModel):
    """Base for response envelopes: immutable, camelCase on the wire."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class SolutionEnvelope(Envelope):
    success: bool = True
    filename: str
    extracted_text: str = Field(..., alias="extractedText")
    solutions: str
    processed_at: datetime = Field(default_factory=utc_now, alias="processedAt")

    @field_serializer("processed_at")
    def _serialize_processed_at(self, value: datetime) -> str:
        return _isoformat(value)


class TextSolutionResponse(SolutionEnvelope):
    """Result of solving manually entered text."""

    pass


class FileSolutionResponse(SolutionEnvelope):
    """Result of solving an uploaded file."""

    file_type: str = Field(..., alias="fileType")


class HealthResponse(Envelope):
    status: str = "ok"
    gemini_api_connected: bool = Field(..., alias="geminiApiConnected")
    timestamp: datetime = Field(default_factory=utc_now)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return _isoformat(value)


class JobStatusResponse(Envelope):
    """Placeholder job status. Processing is synchronous, so always complete."""

    job_id: str = Field(..., alias="jobId")
    status: JobState = JobState.COMPLETED
    progress: int = 100


class ErrorResponse(BaseModel):
    message: str
    errors: Optional[List[dict[str, Any]]] = None
    error: Optional[str] = None


def _isoformat(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
