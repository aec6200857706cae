"""Ownership-safe query helpers."""

from uuid import UUID

from sqlalchemy import Select, select

from backend.docchat.db.models import Document


def select_documents_for_owner(owner_id: UUID) -> Select[tuple[Document]]:
    """Query document table with owner scoping enforced.

    Args:
        owner_id: Authenticated user ID

    Returns:
        Select filtered by owner_id
    """
    return select(Document).where(Document.owner_id == owner_id)


def select_most_recent_document(owner_id: UUID) -> Select[tuple[Document]]:
    """Newest document first; ties on uploaded_at go to the last inserted row."""
    return (
        select_documents_for_owner(owner_id)
        .order_by(Document.uploaded_at.desc(), Document.id.desc())
        .limit(1)
    )
