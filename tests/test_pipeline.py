"""
Tests for request orchestration.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from paper_solver.extraction.dispatcher import create_extraction_dispatcher
from paper_solver.generation.generator import SolutionGenerator
from paper_solver.models import Artifact, ProcessTextRequest
from paper_solver.pipeline import MANUAL_INPUT_FILENAME, SolutionPipeline
from paper_solver.utils.errors import (
    DocumentTooLargeError,
    EmptyExtractionError,
    ExtractionError,
    GenerationError,
    InvalidDocumentError,
    InvalidInputError,
    MissingFileError,
    OCRError,
    ProcessingError,
    ProcessingTimeoutError,
    RequestValidationError,
    UnsupportedFileTypeError,
)
from tests.conftest import SOLUTION_MARKDOWN, FakeLanguageModel, FakeOCREngine, make_image


class SlowLanguageModel:
    async def generate(self, prompt):
        await asyncio.sleep(5)
        return "too late"


class TestProcessText:
    """Manual text input."""

    @pytest.mark.asyncio
    async def test_manual_input(self, pipeline):
        result = await pipeline.process_text({"text": "2+2=?"})

        assert result.success is True
        assert result.extracted_text == "2+2=?"
        assert result.filename == MANUAL_INPUT_FILENAME
        assert result.solutions == SOLUTION_MARKDOWN
        assert result.processed_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_filename_kept(self, pipeline):
        result = await pipeline.process_text({"text": "2+2=?", "filename": "homework.txt"})

        assert result.filename == "homework.txt"

    @pytest.mark.asyncio
    async def test_parsed_request_accepted(self, pipeline):
        result = await pipeline.process_text(ProcessTextRequest(text="5*5"))

        assert result.extracted_text == "5*5"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"text": ""}, {}, {"filename": "x"}, None, ["2+2"]])
    async def test_validation_before_generation(self, pipeline, language_model, payload):
        with pytest.raises(RequestValidationError) as exc_info:
            await pipeline.process_text(payload)

        assert exc_info.value.message == "Invalid input data"
        assert exc_info.value.errors
        assert language_model.prompts == []

    @pytest.mark.asyncio
    async def test_empty_text_error_names_field(self, pipeline):
        with pytest.raises(RequestValidationError) as exc_info:
            await pipeline.process_text({"text": ""})

        assert exc_info.value.errors[0]["loc"] == ("text",)

    @pytest.mark.asyncio
    async def test_whitespace_text_is_invalid_input(self, pipeline, language_model):
        with pytest.raises(InvalidInputError):
            await pipeline.process_text({"text": "   "})

        assert language_model.prompts == []

    @pytest.mark.asyncio
    async def test_generation_failure_propagates(self, settings, dispatcher):
        pipeline = SolutionPipeline(
            dispatcher=dispatcher,
            generator=SolutionGenerator(FakeLanguageModel(error=RuntimeError("503"))),
            settings=settings,
        )

        with pytest.raises(GenerationError, match="Failed to generate solutions: 503"):
            await pipeline.process_text({"text": "2+2=?"})

    @pytest.mark.asyncio
    async def test_unexpected_error_reported_generically(self, settings, dispatcher):
        generator = SolutionGenerator(FakeLanguageModel())
        generator.generate = AsyncMock(side_effect=KeyError("boom"))
        pipeline = SolutionPipeline(dispatcher=dispatcher, generator=generator, settings=settings)

        with pytest.raises(ProcessingError) as exc_info:
            await pipeline.process_text({"text": "2+2=?"})

        assert isinstance(exc_info.value.__cause__, KeyError)


class TestProcessFile:
    """Uploaded files."""

    @pytest.mark.asyncio
    async def test_missing_file(self, pipeline):
        with pytest.raises(MissingFileError, match="No file uploaded"):
            await pipeline.process_file(None)

    @pytest.mark.asyncio
    async def test_pdf(self, pipeline, pdf_artifact, language_model):
        result = await pipeline.process_file(pdf_artifact)

        assert result.success is True
        assert result.file_type == "application/pdf"
        assert result.filename == "paper.pdf"
        assert "What is 2 + 2?" in result.extracted_text
        assert result.solutions == SOLUTION_MARKDOWN
        assert "What is 2 + 2?" in language_model.prompts[0]

    @pytest.mark.asyncio
    async def test_image(self, pipeline, png_artifact, ocr_engine):
        result = await pipeline.process_file(png_artifact)

        assert result.file_type == "image/png"
        assert result.extracted_text == ocr_engine.text
        assert ocr_engine.calls == [png_artifact.data]

    @pytest.mark.asyncio
    async def test_jpeg_alias_reports_canonical_type(self, pipeline):
        artifact = Artifact(data=make_image("JPEG"), content_type="image/jpg", filename="p.jpg")

        result = await pipeline.process_file(artifact)

        assert result.file_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_plain_text(self, pipeline):
        artifact = Artifact(data=b"Q1: 7 x 8", content_type="text/plain", filename="q.txt")

        result = await pipeline.process_file(artifact)

        assert result.file_type == "text/plain"
        assert result.extracted_text == "Q1: 7 x 8"

    @pytest.mark.asyncio
    async def test_empty_pdf_buffer(self, pipeline, language_model):
        artifact = Artifact(data=b"", content_type="application/pdf", filename="empty.pdf")

        with pytest.raises(InvalidDocumentError):
            await pipeline.process_file(artifact)

        assert language_model.prompts == []

    @pytest.mark.asyncio
    async def test_corrupt_pdf(self, pipeline, language_model):
        artifact = Artifact(
            data=b"%PDF-1.4\n%%corrupted data here\n%%EOF",
            content_type="application/pdf",
            filename="broken.pdf",
        )

        with pytest.raises((InvalidDocumentError, ExtractionError), match="Failed to extract text from PDF"):
            await pipeline.process_file(artifact)

        assert language_model.prompts == []

    @pytest.mark.asyncio
    async def test_unsupported_type(self, pipeline, ocr_engine, language_model):
        artifact = Artifact(data=b"PK\x03\x04", content_type="application/zip", filename="a.zip")

        with pytest.raises(UnsupportedFileTypeError, match="PDF, PNG, JPG, or TXT"):
            await pipeline.process_file(artifact)

        assert ocr_engine.calls == []
        assert language_model.prompts == []

    @pytest.mark.asyncio
    async def test_whitespace_text_is_empty_extraction(self, pipeline, language_model):
        artifact = Artifact(data=b"  \n\t \r\n", content_type="text/plain", filename="blank.txt")

        with pytest.raises(EmptyExtractionError, match="No text could be extracted"):
            await pipeline.process_file(artifact)

        assert language_model.prompts == []

    @pytest.mark.asyncio
    async def test_byte_order_mark_and_whitespace_is_empty_extraction(self, pipeline, language_model):
        artifact = Artifact(data=b"\xef\xbb\xbf \n", content_type="text/plain", filename="bom.txt")

        with pytest.raises(EmptyExtractionError):
            await pipeline.process_file(artifact)

        assert language_model.prompts == []

    @pytest.mark.asyncio
    async def test_blank_ocr_is_empty_extraction(self, settings, generator, png_artifact, language_model):
        dispatcher = create_extraction_dispatcher(settings, ocr_engine=FakeOCREngine(text="\n"))
        pipeline = SolutionPipeline(dispatcher=dispatcher, generator=generator, settings=settings)

        with pytest.raises(EmptyExtractionError):
            await pipeline.process_file(png_artifact)

        assert language_model.prompts == []

    @pytest.mark.asyncio
    async def test_ocr_failure(self, settings, generator, png_artifact):
        dispatcher = create_extraction_dispatcher(
            settings, ocr_engine=FakeOCREngine(error=RuntimeError("no tesseract"))
        )
        pipeline = SolutionPipeline(dispatcher=dispatcher, generator=generator, settings=settings)

        with pytest.raises(OCRError, match="no tesseract"):
            await pipeline.process_file(png_artifact)

    @pytest.mark.asyncio
    async def test_oversized_file(self, settings, generator, ocr_engine):
        settings.max_upload_size_bytes = 16
        dispatcher = create_extraction_dispatcher(settings, ocr_engine=ocr_engine)
        pipeline = SolutionPipeline(dispatcher=dispatcher, generator=generator, settings=settings)
        artifact = Artifact(data=b"x" * 17, content_type="text/plain", filename="big.txt")

        with pytest.raises(DocumentTooLargeError):
            await pipeline.process_file(artifact)


class TestTimeouts:
    """Optional stage timeouts."""

    @pytest.mark.asyncio
    async def test_generation_timeout(self, settings, dispatcher):
        settings.generation_timeout_seconds = 0.05
        pipeline = SolutionPipeline(
            dispatcher=dispatcher,
            generator=SolutionGenerator(SlowLanguageModel()),
            settings=settings,
        )

        with pytest.raises(ProcessingTimeoutError, match="generate_solutions"):
            await pipeline.process_text({"text": "2+2=?"})

    @pytest.mark.asyncio
    async def test_no_timeout_by_default(self, pipeline):
        assert pipeline.settings.generation_timeout_seconds is None
        result = await pipeline.process_text({"text": "2+2=?"})

        assert result.solutions


class TestStatusOperations:
    """Health and job status."""

    @pytest.mark.asyncio
    async def test_health_connected(self, pipeline):
        result = await pipeline.health()

        assert result.status == "ok"
        assert result.gemini_api_connected is True

    @pytest.mark.asyncio
    async def test_health_disconnected(self, settings, dispatcher):
        pipeline = SolutionPipeline(
            dispatcher=dispatcher,
            generator=SolutionGenerator(FakeLanguageModel(error=ConnectionError("offline"))),
            settings=settings,
        )

        result = await pipeline.health()

        assert result.gemini_api_connected is False

    def test_job_status_always_complete(self, pipeline):
        result = pipeline.job_status("abc123")

        assert result.job_id == "abc123"
        assert result.status == "completed"
        assert result.progress == 100
