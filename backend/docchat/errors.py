"""Error taxonomy shared by the API and the query pipeline.

Every error carries the HTTP status it maps to and a message that is safe to
show to the end user. Internal detail belongs in logs, not in ``message``.
"""

from fastapi import status


class DocChatError(Exception):
    """Base class for all expected service errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class Unauthenticated(DocChatError):
    """Missing, malformed, expired or forged session token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class InvalidCredentials(DocChatError):
    """Login mismatch. Never says whether the email or the password was wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class Conflict(DocChatError):
    """Duplicate identity at signup."""

    status_code = status.HTTP_409_CONFLICT
    message = "User already exists"


class BadRequest(DocChatError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"


class UnsupportedFormat(BadRequest):
    message = "Only PDF files allowed"


class TooLarge(BadRequest):
    status_code = 413
    message = "File too large"


class NotFound(DocChatError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class NoDocument(NotFound):
    """The user has not uploaded any document yet."""

    message = "No document uploaded"


class SourceMissing(DocChatError):
    """A document record exists but its bytes are gone from storage."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "Document not found on server"


class NoReadableText(DocChatError):
    """Extraction produced empty or whitespace-only text."""

    status_code = 422
    message = "No readable text found"


class StorageFailure(DocChatError):
    message = "Upload failed"


class InferenceFailure(DocChatError):
    """The completion service failed. Logged, then absorbed into the fallback reply."""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Inference service unavailable"

    def __init__(self, reason: str, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message)
