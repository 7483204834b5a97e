"""Plain text extraction."""

from paper_solver.extraction.base import Extractor
from paper_solver.models import ContentType


class TextExtractor(Extractor):
    """Decode a plain text upload as UTF-8. No external capability is used."""

    content_types = (ContentType.TEXT,)

    async def extract(self, data: bytes) -> str:
        # A leading byte-order mark is dropped; invalid byte sequences become U+FFFD
        return data.decode("utf-8-sig", errors="replace")
