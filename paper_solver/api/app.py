"""
HTTP API for the question paper solver.

Routes:
    GET  /api/health           language model connectivity
    POST /api/process-text     solve JSON ``{"text": ..., "filename": ...}``
    POST /api/process-file     solve a multipart upload in field ``file``
    GET  /api/status/{job_id}  placeholder job status
"""

from typing import Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse

from paper_solver import __version__
from paper_solver.models import Artifact, ErrorResponse
from paper_solver.pipeline import SolutionPipeline, create_solution_pipeline
from paper_solver.utils.errors import (
    DocumentTooLargeError,
    EmptyExtractionError,
    InvalidDocumentError,
    InvalidInputError,
    MissingFileError,
    PaperSolverError,
    ProcessingTimeoutError,
    RequestValidationError,
    UnsupportedFileTypeError,
)
from paper_solver.utils.logging import get_logger

logger = get_logger(__name__)

# First match wins, so subclasses come before their bases
STATUS_CODES: list[tuple[type[PaperSolverError], int]] = [
    (RequestValidationError, 400),
    (MissingFileError, 400),
    (UnsupportedFileTypeError, 400),
    (DocumentTooLargeError, 413),
    (InvalidDocumentError, 400),
    (EmptyExtractionError, 400),
    (InvalidInputError, 400),
    (ProcessingTimeoutError, 504),
]


def status_code_for(error: PaperSolverError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


def error_response(error: PaperSolverError) -> JSONResponse:
    body = ErrorResponse(message=error.message)
    if isinstance(error, RequestValidationError):
        body = ErrorResponse(message=error.message, errors=error.errors)
    return JSONResponse(
        status_code=status_code_for(error),
        content=body.model_dump(exclude_none=True, mode="json"),
    )


async def read_upload(file: UploadFile, max_size_bytes: int) -> Artifact:
    """
    Read an upload without buffering more than one byte past the size limit.

    An oversized upload of a supported type is rejected here. Anything else
    is handed on so the pipeline reports it in its usual order.

    Raises:
        DocumentTooLargeError: Upload of a supported type is over the limit
    """
    data = await file.read(max_size_bytes + 1)
    artifact = Artifact(
        data=data,
        content_type=file.content_type,
        filename=file.filename or "upload",
    )
    if artifact.size > max_size_bytes and artifact.resolved_type is not None:
        raise DocumentTooLargeError(
            file_size=file.size or artifact.size,
            max_size=max_size_bytes,
            filename=artifact.filename,
        )
    return artifact


def create_app(pipeline: Optional[SolutionPipeline] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        pipeline: Pipeline to serve (created from settings when omitted)
    """
    app = FastAPI(title="Question Paper Solver", version=__version__)
    app.state.pipeline = pipeline or create_solution_pipeline()

    @app.exception_handler(PaperSolverError)
    async def handle_solver_error(request: Request, exc: PaperSolverError) -> JSONResponse:
        return error_response(exc)

    @app.get("/api/health")
    async def health(request: Request):
        try:
            result = await request.app.state.pipeline.health()
            return result.to_response()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(
                    message="Service health check failed", error=str(e) or "Unknown error"
                ).model_dump(exclude_none=True),
            )

    @app.post("/api/process-text")
    async def process_text(request: Request):
        try:
            payload = await request.json()
        except Exception:
            raise RequestValidationError(
                [{"loc": ["body"], "msg": "Request body must be valid JSON", "type": "json_invalid"}]
            )

        result = await request.app.state.pipeline.process_text(payload)
        return result.to_response()

    @app.post("/api/process-file")
    async def process_file(request: Request, file: Optional[UploadFile] = File(None)):
        artifact = None
        if file is not None:
            pipeline = request.app.state.pipeline
            artifact = await read_upload(file, pipeline.dispatcher.max_size_bytes)
            logger.info(
                f"Received upload {artifact.filename} ({artifact.content_type}, {artifact.size} bytes)"
            )

        result = await request.app.state.pipeline.process_file(artifact)
        return result.to_response()

    @app.get("/api/status/{job_id}")
    async def job_status(request: Request, job_id: str):
        return request.app.state.pipeline.job_status(job_id).to_response()

    return app
