"""Document domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class StoredDocument(BaseModel):
    """Document metadata as seen by the rest of the service (not the ORM row)."""

    document_id: UUID
    owner_id: UUID
    storage_key: str
    original_name: str
    content_type: str = "application/pdf"
    size_bytes: int
    uploaded_at: datetime


class DeleteReport(BaseModel):
    """Outcome of a best-effort purge of a user's documents."""

    deleted: int = 0
    failed: int = 0

    @property
    def partial(self) -> bool:
        return self.failed > 0


class ContextWindow(BaseModel):
    """Extracted document text cut to the configured character budget."""

    text: str
    source_chars: int = Field(..., description="Length of the full extracted text")
    max_chars: int

    @property
    def truncated(self) -> bool:
        return self.source_chars > len(self.text)
