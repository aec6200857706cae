"""Account signup and login against the user table."""

import asyncio
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.docchat.auth.passwords import hash_password, verify_password
from backend.docchat.db.models import User
from backend.docchat.errors import BadRequest, Conflict, InvalidCredentials
from backend.docchat.models.auth import UserRecord

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class Authenticator:
    """Creates accounts and verifies credentials.

    Password hashing runs in a worker thread; bcrypt is deliberately slow.
    """

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession], *, rounds: int = 12
    ) -> None:
        self._session_factory = session_factory
        self._rounds = rounds
        # Compared against when the email is unknown so both failure paths cost the same
        self._dummy_hash = hash_password("not-a-real-password", rounds=rounds)

    async def signup(self, email: str | None, password: str | None) -> UserRecord:
        """Create a new user.

        Raises:
            BadRequest: If email or password is missing
            Conflict: If the email is already registered
        """
        if not email or not email.strip() or not password:
            raise BadRequest("All fields required")

        email = normalize_email(email)
        password_hash = await asyncio.to_thread(hash_password, password, rounds=self._rounds)

        async with self._session_factory() as session:
            user = User(email=email, password_hash=password_hash)
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise Conflict() from e

            logger.info(f"[signup] user_id={user.user_id}")
            return UserRecord(user_id=user.user_id, email=user.email)

    async def login(self, email: str | None, password: str | None) -> UserRecord:
        """Verify credentials.

        Raises:
            InvalidCredentials: Unknown email or wrong password (indistinguishable)
        """
        if not email or not password:
            raise InvalidCredentials()

        async with self._session_factory() as session:
            result = await session.execute(
                select(User).where(User.email == normalize_email(email))
            )
            user = result.scalar_one_or_none()

        stored_hash = user.password_hash if user else self._dummy_hash
        matches = await asyncio.to_thread(verify_password, password, stored_hash)

        if user is None or not matches:
            raise InvalidCredentials()

        return UserRecord(user_id=user.user_id, email=user.email)

    async def get_user(self, user_id: uuid.UUID) -> UserRecord | None:
        """Look up a user by ID (None if the account no longer exists)."""
        async with self._session_factory() as session:
            user = await session.get(User, user_id)

        if user is None:
            return None
        return UserRecord(user_id=user.user_id, email=user.email)
