"""Request context for ownership enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the authenticated user identity.

    Used to enforce ownership boundaries in all document queries.
    """

    user_id: UUID
