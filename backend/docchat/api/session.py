"""Session guard - the gate in front of every authenticated operation."""

from uuid import UUID

from fastapi import Request

from backend.docchat.auth.tokens import SessionTokens


def token_from_request(request: Request, cookie_name: str) -> str | None:
    """Pull the session token from the cookie, or from a Bearer header.

    Returns:
        The raw token, or None if the request carries neither
    """
    token = request.cookies.get(cookie_name)
    if token:
        return token

    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


class SessionGuard:
    """Resolves a session token to a user ID.

    Missing, malformed, expired and forged tokens all fail the same way.
    """

    def __init__(self, tokens: SessionTokens) -> None:
        self._tokens = tokens

    def authenticate(self, token: str | None) -> UUID:
        """Raises Unauthenticated unless the token is valid."""
        return self._tokens.verify(token)
