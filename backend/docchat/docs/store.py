"""Document store - upload metadata in the database, bytes under upload_dir.

Every query is scoped by ``owner_id``; that filter is the only thing keeping
one user's documents away from another's.
"""

import asyncio
import logging
import re
import secrets
import time
from datetime import UTC, datetime
from pathlib import Path, PurePath
from uuid import UUID, uuid4

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.docchat.db.models import Document
from backend.docchat.db.queries import select_documents_for_owner, select_most_recent_document
from backend.docchat.errors import NoDocument, StorageFailure, TooLarge, UnsupportedFormat
from backend.docchat.models.documents import DeleteReport, StoredDocument
from backend.docchat.utils.metrics import metrics

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
PDF_MAGIC = b"%PDF-"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(original_name: str) -> str:
    """Reduce a client-supplied filename to a safe basename."""
    # Clients on Windows send backslash-separated paths
    basename = PurePath(original_name.replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", basename).strip("._")
    return cleaned[:100] or "document.pdf"


def make_storage_key(original_name: str) -> str:
    """Build a collision-resistant storage key.

    Nanosecond timestamp plus a random suffix; no central counter is needed for
    concurrent uploads from different users.
    """
    return f"{time.time_ns()}-{secrets.token_hex(4)}-{safe_filename(original_name)}"


def _to_domain(row: Document) -> StoredDocument:
    uploaded_at = row.uploaded_at
    # SQLite drops the offset on read; stored values are always UTC
    if uploaded_at.tzinfo is None:
        uploaded_at = uploaded_at.replace(tzinfo=UTC)
    return StoredDocument(
        document_id=row.document_id,
        owner_id=row.owner_id,
        storage_key=row.storage_key,
        original_name=row.original_name,
        content_type=row.content_type,
        size_bytes=row.size_bytes,
        uploaded_at=uploaded_at,
    )


class DocumentStore:
    """Owns document records and their byte payloads."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        root: Path,
        *,
        max_bytes: int = 10 * 1024 * 1024,
    ) -> None:
        self._session_factory = session_factory
        self.root = Path(root)
        self.max_bytes = max_bytes

    def prepare(self) -> None:
        """Create the upload directory if it does not exist."""
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, document: StoredDocument) -> Path:
        return self.root / document.storage_key

    def validate(self, data: bytes, content_type: str | None = None) -> None:
        """Check type and size before anything is written.

        Raises:
            UnsupportedFormat: Declared type is not PDF or bytes lack the PDF header
            TooLarge: Payload exceeds max_bytes
        """
        if content_type and content_type.split(";")[0].strip().lower() != PDF_CONTENT_TYPE:
            raise UnsupportedFormat()
        if len(data) > self.max_bytes:
            raise TooLarge(f"File too large (max {self.max_bytes // (1024 * 1024)} MB)")
        if not data.startswith(PDF_MAGIC):
            raise UnsupportedFormat()

    async def save(
        self,
        owner_id: UUID,
        data: bytes,
        original_name: str,
        *,
        content_type: str | None = PDF_CONTENT_TYPE,
    ) -> StoredDocument:
        """Persist bytes then metadata for a new upload.

        Args:
            owner_id: Authenticated user ID
            data: Raw file bytes
            original_name: Client-supplied filename
            content_type: Declared MIME type (None when unknown)

        Returns:
            StoredDocument for the new record

        Raises:
            UnsupportedFormat, TooLarge: Validation failures
            StorageFailure: Filesystem or database error
        """
        try:
            self.validate(data, content_type)
        except (UnsupportedFormat, TooLarge):
            metrics.inc_upload("rejected")
            raise

        storage_key = make_storage_key(original_name)
        path = self.root / storage_key

        try:
            await asyncio.to_thread(self._write_bytes, path, data)
        except OSError as e:
            logger.error(f"[save] owner_id={owner_id} failed to write {storage_key}: {e}")
            metrics.inc_upload("storage_failure")
            raise StorageFailure() from e

        row = Document(
            document_id=uuid4(),
            owner_id=owner_id,
            storage_key=storage_key,
            original_name=original_name,
            content_type=PDF_CONTENT_TYPE,
            size_bytes=len(data),
            uploaded_at=datetime.now(UTC),
        )

        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"[save] owner_id={owner_id} failed to record {storage_key}: {e}")
            # Bytes without a record would never be cleaned up
            await asyncio.to_thread(path.unlink, missing_ok=True)
            metrics.inc_upload("storage_failure")
            raise StorageFailure() from e

        metrics.inc_upload("stored")
        logger.info(f"[save] owner_id={owner_id} storage_key={storage_key} bytes={len(data)}")
        return _to_domain(row)

    async def most_recent_for(self, owner_id: UUID) -> StoredDocument:
        """Return the caller's latest upload.

        Raises:
            NoDocument: The user owns no documents
        """
        async with self._session_factory() as session:
            result = await session.execute(select_most_recent_document(owner_id))
            row = result.scalar_one_or_none()

        if row is None:
            raise NoDocument()
        return _to_domain(row)

    async def list_for(self, owner_id: UUID) -> list[StoredDocument]:
        """All documents owned by the caller, newest first."""
        query = select_documents_for_owner(owner_id).order_by(
            Document.uploaded_at.desc(), Document.id.desc()
        )
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_to_domain(row) for row in result.scalars().all()]

    async def read_bytes(self, document: StoredDocument) -> bytes | None:
        """Read a document's payload, or None if the file is gone."""
        try:
            return await asyncio.to_thread(self.path_for(document).read_bytes)
        except FileNotFoundError:
            return None

    async def delete_all_for(self, owner_id: UUID) -> DeleteReport:
        """Best-effort removal of every document the caller owns.

        Bytes go first. A record is dropped only once its bytes are gone (or
        were already missing), so a failed unlink leaves the record behind for
        the next attempt instead of orphaning the file.

        An upload racing with this call may or may not be included.
        """
        documents = await self.list_for(owner_id)
        removed: list[UUID] = []
        failed = 0

        for document in documents:
            try:
                await asyncio.to_thread(self.path_for(document).unlink, missing_ok=True)
            except OSError as e:
                failed += 1
                metrics.inc_deletion("failed")
                logger.warning(
                    f"[delete_all] owner_id={owner_id} could not remove "
                    f"{document.storage_key}: {e}"
                )
                continue
            removed.append(document.document_id)

        if removed:
            try:
                async with self._session_factory() as session:
                    await session.execute(
                        delete(Document).where(
                            Document.owner_id == owner_id,
                            Document.document_id.in_(removed),
                        )
                    )
                    await session.commit()
            except SQLAlchemyError as e:
                logger.error(f"[delete_all] owner_id={owner_id} failed to drop records: {e}")
                metrics.inc_deletion("failed")
                return DeleteReport(deleted=0, failed=failed + len(removed))

        for _ in removed:
            metrics.inc_deletion("deleted")

        logger.info(f"[delete_all] owner_id={owner_id} deleted={len(removed)} failed={failed}")
        return DeleteReport(deleted=len(removed), failed=failed)

    @staticmethod
    def _write_bytes(path: Path, data: bytes) -> None:
        # "xb" refuses to overwrite an existing key
        with open(path, "xb") as fh:
            fh.write(data)
