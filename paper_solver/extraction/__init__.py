"""
Text extraction for uploaded question papers.

One extractor per accepted content type, selected by the dispatcher.
"""

from paper_solver.extraction.base import Extractor, OCREngine, PDFTextParser
from paper_solver.extraction.dispatcher import (
    ExtractionDispatcher,
    create_extraction_dispatcher,
)
from paper_solver.extraction.image import ImageExtractor, TesseractOCREngine
from paper_solver.extraction.pdf import PDFExtractor, PyMuPDFTextParser
from paper_solver.extraction.text import TextExtractor

__all__ = [
    "Extractor",
    "OCREngine",
    "PDFTextParser",
    "ExtractionDispatcher",
    "create_extraction_dispatcher",
    "ImageExtractor",
    "TesseractOCREngine",
    "PDFExtractor",
    "PyMuPDFTextParser",
    "TextExtractor",
]
