"""Account endpoints - POST /signup, POST /login, POST /logout, GET /auth/check."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from backend.docchat.api.auth import (
    clear_session_cookie,
    get_current_context,
    get_services,
    set_session_cookie,
)
from backend.docchat.db.context import RequestContext
from backend.docchat.errors import Unauthenticated
from backend.docchat.models.auth import (
    AuthCheckResponse,
    AuthResponse,
    Credentials,
    SuccessResponse,
    UserPublic,
)
from backend.docchat.services import Services

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/signup", response_model=AuthResponse)
async def signup(
    credentials: Credentials,
    response: Response,
    services: Annotated[Services, Depends(get_services)],
) -> AuthResponse:
    """Create an account and start a session.

    Raises:
        BadRequest: 400 if email or password is missing
        Conflict: 409 if the email is already registered
    """
    user = await services.accounts.signup(credentials.email, credentials.password)
    set_session_cookie(response, services.tokens.mint(user.user_id), services)
    return AuthResponse(user=UserPublic(email=user.email))


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: Credentials,
    response: Response,
    services: Annotated[Services, Depends(get_services)],
) -> AuthResponse:
    """Verify credentials and start a session.

    Raises:
        InvalidCredentials: 401, same message for unknown email and wrong password
    """
    user = await services.accounts.login(credentials.email, credentials.password)
    set_session_cookie(response, services.tokens.mint(user.user_id), services)
    return AuthResponse(user=UserPublic(email=user.email))


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    response: Response, services: Annotated[Services, Depends(get_services)]
) -> SuccessResponse:
    """Clear the session cookie. Tokens are stateless, so nothing is revoked server-side."""
    clear_session_cookie(response, services)
    return SuccessResponse()


@router.get("/auth/check", response_model=AuthCheckResponse)
async def auth_check(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    services: Annotated[Services, Depends(get_services)],
) -> AuthCheckResponse:
    user = await services.accounts.get_user(ctx.user_id)
    if user is None:
        # Valid signature but the account is gone
        raise Unauthenticated()
    return AuthCheckResponse(isAuthenticated=True, user=UserPublic(email=user.email))
