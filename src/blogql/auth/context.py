"""Authentication context for request handling."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass
class AuthContext:
    """Runtime authentication context for a request.

    Populated from the bearer token before any resolver runs; resolvers only
    read it.
    """

    user_id: UUID | None
    email: str | None = None
    token: str | None = None

    @property
    def is_auth(self) -> bool:
        """Check if the request is authenticated."""
        return self.user_id is not None

    @classmethod
    def anonymous(cls) -> AuthContext:
        return cls(user_id=None)
