"""Request and response models for chat and upload endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Body for POST /chat."""

    message: str | None = Field(None, description="Question about the uploaded document")
    structured: bool = Field(False, description="Ask for the sectioned Markdown layout")


class ChatReply(BaseModel):
    reply: str


class ClearChatResponse(BaseModel):
    success: bool
    message: str


class UploadedFile(BaseModel):
    filename: str = Field(..., description="Storage key of the persisted bytes")
    originalName: str
    uploadedAt: datetime


class UploadResponse(BaseModel):
    success: bool = True
    file: UploadedFile
