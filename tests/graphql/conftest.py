"""
Fixtures for GraphQL integration tests.
"""

from uuid import UUID

import pytest

CREATE_USER = """
mutation CreateUser($email: String!, $name: String!, $password: String!) {
  createUser(userInput: {email: $email, name: $name, password: $password}) {
    _id
    email
    name
    status
  }
}
"""

CREATE_POST = """
mutation CreatePost($title: String!, $content: String!, $imageUrl: String) {
  createPost(postInput: {title: $title, content: $content, imageUrl: $imageUrl}) {
    _id
    title
    content
    imageUrl
    creator { _id name }
    createdAt
    updatedAt
  }
}
"""


@pytest.fixture
def register_user(execute):
    """Register a user through the createUser mutation and return its id."""

    async def _register(email: str = "a@b.com", name: str = "A", password: str = "secret") -> UUID:
        result = await execute(
            CREATE_USER, {"email": email, "name": name, "password": password}
        )
        assert result.errors is None, result.errors
        return UUID(result.data["createUser"]["_id"])

    return _register


@pytest.fixture
def create_post(execute):
    """Create a post as ``user_id`` and return the response payload."""

    async def _create(
        user_id: UUID,
        title: str = "First post",
        content: str = "Hello world",
        image_url: str | None = "images/first.png",
    ) -> dict:
        result = await execute(
            CREATE_POST,
            {"title": title, "content": content, "imageUrl": image_url},
            user_id=user_id,
        )
        assert result.errors is None, result.errors
        return result.data["createPost"]

    return _create
