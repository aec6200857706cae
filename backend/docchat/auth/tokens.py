"""Session tokens - signed, stateless, expiring.

A token is a JWT carrying the user ID as ``sub``. There is no server-side
revocation list; logout only clears the client's cookie.
"""

import uuid
from datetime import UTC, datetime, timedelta

import jwt

from backend.docchat.errors import Unauthenticated


class SessionTokens:
    """Mint and verify session tokens."""

    def __init__(self, secret: str, *, algorithm: str = "HS256", ttl: timedelta) -> None:
        """Initialize token codec.

        Args:
            secret: Signing secret (must be non-empty)
            algorithm: JWT signing algorithm
            ttl: Validity period for minted tokens

        Raises:
            ValueError: If the secret is empty
        """
        if not secret:
            raise ValueError("JWT_SECRET must be set to sign session tokens.")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl

    def mint(self, user_id: uuid.UUID, *, now: datetime | None = None) -> str:
        """Create a token bound to ``user_id`` that expires after ``ttl``."""
        issued_at = now or datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str | None) -> uuid.UUID:
        """Resolve a token to its user ID.

        Raises:
            Unauthenticated: For absent, malformed, expired or badly signed tokens.
                The cause is chained for logs but never surfaced to the caller.
        """
        if not token:
            raise Unauthenticated()

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
            return uuid.UUID(payload["sub"])
        except (jwt.InvalidTokenError, ValueError, TypeError) as e:
            raise Unauthenticated() from e
