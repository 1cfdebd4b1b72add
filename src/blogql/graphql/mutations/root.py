"""
Root GraphQL mutation definitions
"""

import strawberry

from ..types.post import Post
from ..types.user import User


# Input types for mutations
@strawberry.input(name="UserInputData")
class UserInputData:
    """Input for registering a user."""

    email: str
    name: str
    password: str


@strawberry.input(name="PostInputData")
class PostInputData:
    """Input for creating or updating a post.

    ``image_url`` is required on create; on update it is applied only when given.
    """

    title: str
    content: str
    image_url: str | None = None


@strawberry.type(name="RootMutation")
class Mutation:
    """Root GraphQL mutation type."""

    # User mutations
    @strawberry.mutation(name="createUser")
    async def create_user(self, info: strawberry.Info, user_input: UserInputData) -> User:
        """Register a new user."""
        from ..resolvers.user import create_user

        return await create_user(info, user_input)

    @strawberry.mutation(name="updateStatus")
    async def update_status(self, info: strawberry.Info, status: str) -> User:
        """Update the current user's status."""
        from ..resolvers.user import update_status

        return await update_status(info, status)

    # Post mutations
    @strawberry.mutation(name="createPost")
    async def create_post(self, info: strawberry.Info, post_input: PostInputData) -> Post:
        """Create a new post."""
        from ..resolvers.post import create_post

        return await create_post(info, post_input)

    @strawberry.mutation(name="updatePost")
    async def update_post(
        self, info: strawberry.Info, id: strawberry.ID, post_input: PostInputData
    ) -> Post:
        """Update an existing post."""
        from ..resolvers.post import update_post

        return await update_post(info, id, post_input)

    @strawberry.mutation(name="deletePost")
    async def delete_post(self, info: strawberry.Info, post_id: strawberry.ID) -> bool | None:
        """Delete a post."""
        from ..resolvers.post import delete_post

        return await delete_post(info, post_id)
