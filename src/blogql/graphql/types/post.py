"""
Post GraphQL type definitions
"""

import strawberry

from .user import User


@strawberry.type
class Post:
    """Post type for GraphQL API. Timestamps are ISO-8601 strings."""

    id: strawberry.ID = strawberry.field(name="_id")
    title: str
    content: str
    image_url: str
    creator: User
    created_at: str
    updated_at: str


@strawberry.type
class PostData:
    """One page of posts plus the total number of posts."""

    posts: list[Post]
    total_posts: int
