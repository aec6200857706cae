"""Request and response models for the account endpoints."""

from uuid import UUID

from pydantic import BaseModel


class Credentials(BaseModel):
    """Body for POST /signup and POST /login.

    Fields are optional so a missing value maps to 400, not 422.
    """

    email: str | None = None
    password: str | None = None


class UserPublic(BaseModel):
    email: str


class UserRecord(BaseModel):
    """Verified identity returned by the authenticator."""

    user_id: UUID
    email: str


class AuthResponse(BaseModel):
    success: bool = True
    user: UserPublic


class AuthCheckResponse(BaseModel):
    isAuthenticated: bool
    user: UserPublic


class SuccessResponse(BaseModel):
    success: bool = True
