"""Context assembly - document bytes to a bounded slice of extracted text."""

import asyncio
import logging

from backend.docchat.docs.extract import ExtractionError, TextExtractor
from backend.docchat.docs.store import DocumentStore
from backend.docchat.errors import NoReadableText, SourceMissing
from backend.docchat.models.documents import ContextWindow, StoredDocument

logger = logging.getLogger(__name__)


def truncate_text(text: str, max_chars: int) -> str:
    """Hard cap on character count.

    ``str`` indexes by code point, so the cut never lands inside a multi-byte
    character. A lone high surrogate left at the edge (possible with text
    decoded from UTF-16 surrogate pairs) is dropped.
    """
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    if cut and "\ud800" <= cut[-1] <= "\udbff":
        cut = cut[:-1]
    return cut


class ContextAssembler:
    """Builds the context window sent to the inference service.

    The budget is in characters, not model tokens.
    """

    def __init__(
        self, store: DocumentStore, extractor: TextExtractor, *, max_chars: int = 6000
    ) -> None:
        self._store = store
        self._extractor = extractor
        self.max_chars = max_chars

    async def assemble(self, document: StoredDocument) -> ContextWindow:
        """Extract and truncate a document's text.

        Raises:
            SourceMissing: The record's bytes are not in storage
            NoReadableText: Extraction failed or produced only whitespace
        """
        data = await self._store.read_bytes(document)
        if data is None:
            logger.error(
                f"[assemble] document_id={document.document_id} has a record but no bytes "
                f"at {document.storage_key}"
            )
            raise SourceMissing()

        try:
            text = await asyncio.to_thread(self._extractor.extract, data)
        except ExtractionError as e:
            raise NoReadableText() from e

        if not text or not text.strip():
            raise NoReadableText()

        return ContextWindow(
            text=truncate_text(text, self.max_chars),
            source_chars=len(text),
            max_chars=self.max_chars,
        )
