"""
User GraphQL type definitions
"""

from typing import TYPE_CHECKING, Annotated

import strawberry

if TYPE_CHECKING:
    from .post import Post


@strawberry.type
class User:
    """User type for GraphQL API.

    The stored password hash is never exposed.
    """

    id: strawberry.ID = strawberry.field(name="_id")
    email: str
    name: str
    status: str

    @strawberry.field
    async def posts(self, info: strawberry.Info) -> list[Annotated["Post", strawberry.lazy(".post")]]:
        """Get posts created by this user, oldest first."""
        from ..resolvers.post import resolve_user_posts

        return await resolve_user_posts(self, info)
