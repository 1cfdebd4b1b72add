"""
Root GraphQL query definitions
"""

import strawberry

from ..types.auth import AuthData
from ..types.post import Post, PostData
from ..types.user import User


@strawberry.type(name="RootQuery")
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def login(self, info: strawberry.Info, email: str, password: str) -> AuthData:
        """Exchange credentials for a signed token."""
        from ..resolvers.user import login

        return await login(info, email, password)

    @strawberry.field
    async def posts(self, info: strawberry.Info, pages: int) -> PostData:
        """Get one page of posts and the total post count."""
        from ..resolvers.post import resolve_posts

        return await resolve_posts(info, pages)

    @strawberry.field
    async def post(self, info: strawberry.Info, post_id: strawberry.ID) -> Post:
        """Get a post by ID."""
        from ..resolvers.post import resolve_post_by_id

        return await resolve_post_by_id(info, post_id)

    @strawberry.field
    async def user(self, info: strawberry.Info) -> User:
        """Get the current authenticated user."""
        from ..resolvers.user import resolve_current_user

        return await resolve_current_user(info)
