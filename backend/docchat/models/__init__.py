"""Models package - re-exports for convenience."""

from backend.docchat.models.auth import (
    AuthCheckResponse,
    AuthResponse,
    Credentials,
    SuccessResponse,
    UserPublic,
    UserRecord,
)
from backend.docchat.models.chat import (
    ChatReply,
    ChatRequest,
    ClearChatResponse,
    UploadedFile,
    UploadResponse,
)
from backend.docchat.models.documents import ContextWindow, DeleteReport, StoredDocument

__all__ = [
    "AuthCheckResponse",
    "AuthResponse",
    "ChatReply",
    "ChatRequest",
    "ClearChatResponse",
    "ContextWindow",
    "Credentials",
    "DeleteReport",
    "StoredDocument",
    "SuccessResponse",
    "UploadResponse",
    "UploadedFile",
    "UserPublic",
    "UserRecord",
]
