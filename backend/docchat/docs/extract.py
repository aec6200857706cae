"""Text extraction from PDF bytes (pypdf)."""

import io
import logging
from typing import Protocol

from pypdf import PdfReader
from pypdf.errors import PyPdfError

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """The payload could not be parsed as a PDF."""


class TextExtractor(Protocol):
    """Protocol for text extractor implementations."""

    def extract(self, data: bytes) -> str:
        """Return the document's text.

        Raises:
            ExtractionError: If the bytes cannot be parsed
        """
        ...


class PdfTextExtractor:
    """pypdf-backed extractor. Pages are joined with newlines, in order."""

    def extract(self, data: bytes) -> str:
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except (PyPdfError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"PDF text extraction failed: {type(e).__name__}: {e}")
            raise ExtractionError(str(e)) from e

        return "\n".join(pages)
