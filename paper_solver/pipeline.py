"""
Request orchestration for the question paper solver.

Composes the extraction dispatcher and the solution generator into the
public operations. Each request moves through
received -> validated -> extracted (files only) -> generated -> responded,
and any stage can end it with one of the errors in ``utils.errors``.
Nothing is retried.
"""

import asyncio
from typing import Any, Awaitable, Optional, TypeVar, Union
from uuid import uuid4

from pydantic import ValidationError

from paper_solver.config import Settings, get_settings
from paper_solver.extraction.dispatcher import (
    ExtractionDispatcher,
    create_extraction_dispatcher,
)
from paper_solver.generation.generator import SolutionGenerator, create_solution_generator
from paper_solver.models import (
    Artifact,
    FileSolutionResponse,
    HealthResponse,
    JobStatusResponse,
    ProcessTextRequest,
    TextSolutionResponse,
)
from paper_solver.utils.errors import (
    EmptyExtractionError,
    MissingFileError,
    PaperSolverError,
    ProcessingError,
    ProcessingTimeoutError,
    RequestValidationError,
)
from paper_solver.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

T = TypeVar("T")

MANUAL_INPUT_FILENAME = "Manual Input"


class SolutionPipeline:
    """
    Orchestrates extraction and solution generation for one request at a time.

    The pipeline holds no per-request state, so a single instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        dispatcher: Optional[ExtractionDispatcher] = None,
        generator: Optional[SolutionGenerator] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Initialize the pipeline.

        Components are created from settings when not provided.
        """
        self.settings = settings or get_settings()
        self.dispatcher = dispatcher or create_extraction_dispatcher(self.settings)
        self.generator = generator or create_solution_generator(self.settings)

    async def process_text(self, payload: Union[ProcessTextRequest, dict[str, Any]]) -> TextSolutionResponse:
        """
        Solve manually entered question text.

        Args:
            payload: ``{"text": ..., "filename": ...}`` or a parsed request

        Raises:
            RequestValidationError: If the payload fails schema validation
            InvalidInputError: If the text is only whitespace
            GenerationError: If solution generation fails
            ProcessingTimeoutError: If generation exceeds its timeout
            ProcessingError: For any unanticipated failure
        """
        with LogContext(request_id=uuid4().hex[:12], operation="process_text"):
            try:
                request = self._validate_text_request(payload)
                logger.info(f"Processing text input ({len(request.text)} characters)")

                solutions = await self._run_stage(
                    self.generator.generate(request.text),
                    "generate_solutions",
                    self.settings.generation_timeout_seconds,
                )

                return TextSolutionResponse(
                    extracted_text=request.text,
                    solutions=solutions,
                    filename=request.filename or MANUAL_INPUT_FILENAME,
                )
            except PaperSolverError as e:
                logger.error(f"Text processing error: {e}")
                raise
            except Exception as e:
                logger.exception("Unexpected text processing error")
                raise ProcessingError(str(e) or "Failed to process text") from e

    async def process_file(self, artifact: Optional[Artifact]) -> FileSolutionResponse:
        """
        Extract text from an uploaded file and solve it.

        Args:
            artifact: The uploaded file, or None when nothing was attached

        Raises:
            MissingFileError: If no artifact was given
            UnsupportedFileTypeError: If the content type is not accepted
            InvalidDocumentError: If the file is oversized or malformed
            ExtractionError: If OCR or PDF parsing fails
            EmptyExtractionError: If extraction produced no text
            GenerationError: If solution generation fails
            ProcessingTimeoutError: If a stage exceeds its timeout
            ProcessingError: For any unanticipated failure
        """
        if artifact is None:
            logger.warning("File processing request without a file")
            raise MissingFileError()

        with LogContext(
            request_id=uuid4().hex[:12],
            operation="process_file",
            upload_name=artifact.filename,
            declared_type=artifact.content_type,
        ):
            try:
                content_type = self.dispatcher.resolve(artifact)

                extracted_text = await self._run_stage(
                    self.dispatcher.extract(artifact),
                    "extract_text",
                    self.settings.extraction_timeout_seconds,
                )
                if not extracted_text.strip():
                    raise EmptyExtractionError()

                logger.info(f"Extracted {len(extracted_text)} characters from {artifact.filename}")

                solutions = await self._run_stage(
                    self.generator.generate(extracted_text),
                    "generate_solutions",
                    self.settings.generation_timeout_seconds,
                )

                return FileSolutionResponse(
                    filename=artifact.filename,
                    file_type=content_type.value,
                    extracted_text=extracted_text,
                    solutions=solutions,
                )
            except PaperSolverError as e:
                logger.error(f"File processing error: {e}")
                raise
            except Exception as e:
                logger.exception("Unexpected file processing error")
                raise ProcessingError(str(e) or "Failed to process file") from e

    async def health(self) -> HealthResponse:
        """Report whether the language model is reachable."""
        connected = await self.generator.probe()
        return HealthResponse(gemini_api_connected=connected)

    def job_status(self, job_id: str) -> JobStatusResponse:
        """
        Report the status of a processing job.

        Requests are processed synchronously, so every job is complete by
        the time a client can ask about it.
        """
        return JobStatusResponse(job_id=job_id)

    def _validate_text_request(self, payload: Union[ProcessTextRequest, dict[str, Any]]) -> ProcessTextRequest:
        if isinstance(payload, ProcessTextRequest):
            return payload
        try:
            return ProcessTextRequest.model_validate(payload)
        except ValidationError as e:
            raise RequestValidationError(
                e.errors(include_url=False, include_context=False, include_input=False)
            )

    async def _run_stage(self, coro: Awaitable[T], operation: str, timeout: Optional[float]) -> T:
        """Await a pipeline stage, enforcing its timeout when one is set."""
        if timeout is None:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=timeout)
        except asyncio.TimeoutError:
            raise ProcessingTimeoutError(operation, timeout)


def create_solution_pipeline(settings: Optional[Settings] = None) -> SolutionPipeline:
    """Create a pipeline with default components."""
    return SolutionPipeline(settings=settings or get_settings())
