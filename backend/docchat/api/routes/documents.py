"""Document endpoints - POST /documents (upload), GET /documents (list)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, UploadFile

from backend.docchat.api.auth import get_current_context, get_services
from backend.docchat.db.context import RequestContext
from backend.docchat.errors import BadRequest, TooLarge
from backend.docchat.models.chat import UploadedFile, UploadResponse
from backend.docchat.models.documents import StoredDocument
from backend.docchat.services import Services

router = APIRouter(prefix="/documents", tags=["documents"])
logger = logging.getLogger(__name__)


def _uploaded_file(document: StoredDocument) -> UploadedFile:
    return UploadedFile(
        filename=document.storage_key,
        originalName=document.original_name,
        uploadedAt=document.uploaded_at,
    )


@router.post("", response_model=UploadResponse)
async def upload_document(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    services: Annotated[Services, Depends(get_services)],
    file: UploadFile | None = None,
) -> UploadResponse:
    """Store a PDF as the caller's newest document.

    Args:
        ctx: Request context (user_id)
        services: Service container
        file: Multipart field ``file``

    Returns:
        Stored file metadata

    Raises:
        BadRequest: 400 if no file was sent or it is not a PDF
        TooLarge: 413 if the file exceeds max_upload_bytes
    """
    if file is None or not file.filename:
        raise BadRequest("No file uploaded")

    # Read one byte past the limit so oversized uploads are caught without buffering them
    max_bytes = services.store.max_bytes
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise TooLarge(f"File too large (max {max_bytes // (1024 * 1024)} MB)")

    document = await services.store.save(
        ctx.user_id, data, file.filename, content_type=file.content_type
    )
    return UploadResponse(file=_uploaded_file(document))


@router.get("", response_model=list[UploadedFile])
async def list_documents(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    services: Annotated[Services, Depends(get_services)],
) -> list[UploadedFile]:
    """List the caller's documents, newest first. Only the newest is used for chat."""
    documents = await services.store.list_for(ctx.user_id)
    return [_uploaded_file(d) for d in documents]
