"""FastAPI dependencies for services and session authentication."""

from typing import Annotated

from fastapi import Depends, Request, Response

from backend.docchat.api.session import token_from_request
from backend.docchat.db.context import RequestContext
from backend.docchat.services import Services


def get_services(request: Request) -> Services:
    """Services built at startup and attached to the app."""
    return request.app.state.services


def get_session_token(
    request: Request, services: Annotated[Services, Depends(get_services)]
) -> str | None:
    """Raw session token from cookie or Bearer header (None if absent)."""
    return token_from_request(request, services.settings.session_cookie_name)


async def get_current_context(
    token: Annotated[str | None, Depends(get_session_token)],
    services: Annotated[Services, Depends(get_services)],
) -> RequestContext:
    """Resolve the session to a request context.

    Raises:
        Unauthenticated: Mapped to ``401 {"message": "Unauthorized"}`` for every
            failure cause, including a missing token
    """
    return RequestContext(user_id=services.guard.authenticate(token))


def set_session_cookie(response: Response, token: str, services: Services) -> None:
    """Attach the session as an HTTP-only cookie."""
    settings = services.settings
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=int(services.tokens.ttl.total_seconds()),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none" if settings.cookie_secure else "lax",
    )


def clear_session_cookie(response: Response, services: Services) -> None:
    settings = services.settings
    response.delete_cookie(
        settings.session_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none" if settings.cookie_secure else "lax",
    )
