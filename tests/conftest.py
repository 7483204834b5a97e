"""
Shared fixtures for the question paper solver tests.

The OCR engine, PDF parser and language model are replaced by fakes that
record their calls. Real PDFs and images are built in memory with PyMuPDF
and Pillow.
"""

import io
from typing import List, Optional

import fitz
import pytest
from PIL import Image

from paper_solver.config import Settings
from paper_solver.extraction.dispatcher import create_extraction_dispatcher
from paper_solver.generation.generator import SolutionGenerator
from paper_solver.models import Artifact
from paper_solver.pipeline import SolutionPipeline

SOLUTION_MARKDOWN = "## Question 1\n\nThe answer is 4."


class FakeOCREngine:
    """OCR engine returning canned text."""

    def __init__(self, text: str = "What is 3 x 3?", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls: List[bytes] = []

    def recognize(self, image_bytes: bytes) -> str:
        self.calls.append(image_bytes)
        if self.error:
            raise self.error
        return self.text


class FakePDFParser:
    """PDF parser returning canned text."""

    def __init__(self, text: str = "Solve x + 1 = 2", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls: List[bytes] = []

    def parse(self, pdf_bytes: bytes) -> str:
        self.calls.append(pdf_bytes)
        if self.error:
            raise self.error
        return self.text


class FakeLanguageModel:
    """Language model returning a canned completion."""

    def __init__(self, response: Optional[str] = SOLUTION_MARKDOWN, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.response


def make_pdf(*page_texts: str) -> bytes:
    """Build a PDF with one page per text."""
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def make_image(image_format: str = "PNG", size=(64, 32)) -> bytes:
    """Build a small blank image in the given Pillow format."""
    buffer = io.BytesIO()
    Image.new("RGB", size, "white").save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def settings():
    """Settings with a test key and no timeouts."""
    return Settings(
        gemini_api_key="test-key",
        max_upload_size_bytes=10 * 1024 * 1024,
        extraction_timeout_seconds=None,
        generation_timeout_seconds=None,
    )


@pytest.fixture
def ocr_engine():
    return FakeOCREngine()


@pytest.fixture
def language_model():
    return FakeLanguageModel()


@pytest.fixture
def dispatcher(settings, ocr_engine):
    """Dispatcher with fake OCR and the real PyMuPDF parser."""
    return create_extraction_dispatcher(settings, ocr_engine=ocr_engine)


@pytest.fixture
def generator(language_model):
    return SolutionGenerator(language_model)


@pytest.fixture
def pipeline(settings, dispatcher, generator):
    return SolutionPipeline(dispatcher=dispatcher, generator=generator, settings=settings)


@pytest.fixture
def pdf_artifact():
    return Artifact(
        data=make_pdf("1. What is 2 + 2?"),
        content_type="application/pdf",
        filename="paper.pdf",
    )


@pytest.fixture
def png_artifact():
    return Artifact(data=make_image("PNG"), content_type="image/png", filename="paper.png")
