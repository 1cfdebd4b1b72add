"""
Integration tests for post queries and mutations against a real database.
"""

import uuid
from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from sqlalchemy import event, func, select
from sqlalchemy.orm import selectinload

from blogql.database.connection import get_async_engine, get_async_session
from blogql.dbmodels import Posts, Users

pytestmark = [
    pytest.mark.integration,
    pytest.mark.asyncio,
    pytest.mark.usefixtures("sqlite_database"),
]

CREATE_POST = """
mutation CreatePost($title: String!, $content: String!, $imageUrl: String) {
  createPost(postInput: {title: $title, content: $content, imageUrl: $imageUrl}) {
    _id
    title
  }
}
"""

POSTS = """
query Posts($pages: Int!) {
  posts(pages: $pages) {
    posts { _id title creator { name } }
    totalPosts
  }
}
"""

POST = """
query Post($postId: ID!) {
  post(postId: $postId) {
    _id
    title
    content
    imageUrl
    creator { _id email }
    createdAt
    updatedAt
  }
}
"""

UPDATE_POST = """
mutation UpdatePost($id: ID!, $title: String!, $content: String!, $imageUrl: String) {
  updatePost(id: $id, postInput: {title: $title, content: $content, imageUrl: $imageUrl}) {
    _id
    title
    content
    imageUrl
    updatedAt
  }
}
"""

DELETE_POST = """
mutation DeletePost($postId: ID!) {
  deletePost(postId: $postId)
}
"""


async def count_posts() -> int:
    async with get_async_session() as session:
        return await session.scalar(select(func.count()).select_from(Posts))


async def get_post(post_id: str) -> Posts | None:
    async with get_async_session() as session:
        return await session.get(Posts, uuid.UUID(post_id))


async def get_user_post_ids(user_id: uuid.UUID) -> list[str]:
    async with get_async_session() as session:
        stmt = select(Users).where(Users.id == user_id).options(selectinload(Users.posts))
        result = await session.execute(stmt)
        user = result.scalar_one()
        return [str(post.id) for post in user.posts]


@pytest.fixture
def executed_sql(sqlite_database):
    """Statements sent to the database while the test runs."""
    statements: list[str] = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    engine = get_async_engine().sync_engine
    event.listen(engine, "before_cursor_execute", record)
    yield statements
    event.remove(engine, "before_cursor_execute", record)


class TestCreatePost:
    async def test_creates_post_and_links_creator(self, create_post, register_user):
        user_id = await register_user()

        post = await create_post(user_id)

        assert post["title"] == "First post"
        assert post["content"] == "Hello world"
        assert post["imageUrl"] == "images/first.png"
        assert post["creator"] == {"_id": str(user_id), "name": "A"}
        created_at = datetime.fromisoformat(post["createdAt"])
        assert created_at.tzinfo is not None
        assert post["createdAt"] == post["updatedAt"]

        assert await get_user_post_ids(user_id) == [post["_id"]]

    async def test_requires_auth(self, execute, register_user):
        await register_user()

        result = await execute(
            CREATE_POST, {"title": "First post", "content": "Hello world", "imageUrl": "a.png"}
        )

        assert result.data is None
        assert result.errors[0].message == "Not authenticated."
        assert result.errors[0].extensions["status"] == 403
        assert await count_posts() == 0

    async def test_invalid_title_and_content(self, execute, register_user):
        user_id = await register_user()

        result = await execute(
            CREATE_POST,
            {"title": "", "content": "   ", "imageUrl": "a.png"},
            user_id=user_id,
        )

        error = result.errors[0]
        assert error.extensions["status"] == 422
        assert error.extensions["data"] == [
            {"message": "Title is invalid."},
            {"message": "Content is invalid."},
        ]
        assert await count_posts() == 0

    @pytest.mark.parametrize("image_url", [None, "", "  "])
    async def test_missing_image(self, execute, register_user, image_url):
        user_id = await register_user()

        result = await execute(
            CREATE_POST,
            {"title": "First post", "content": "Hello world", "imageUrl": image_url},
            user_id=user_id,
        )

        error = result.errors[0]
        assert error.extensions["status"] == 422
        assert {"message": "Image is invalid."} in error.extensions["data"]
        assert await count_posts() == 0

    async def test_token_for_removed_user(self, execute):
        result = await execute(
            CREATE_POST,
            {"title": "First post", "content": "Hello world", "imageUrl": "a.png"},
            user_id=uuid.uuid4(),
        )

        assert result.errors[0].extensions["status"] == 404
        assert await count_posts() == 0


class TestPostsQuery:
    async def test_pagination(self, execute, register_user, create_post):
        user_id = await register_user()
        for number in range(1, 6):
            await create_post(user_id, title=f"Post {number}")

        second_page = await execute(POSTS, {"pages": 2}, user_id=user_id)
        last_page = await execute(POSTS, {"pages": 3}, user_id=user_id)

        assert second_page.errors is None
        data = second_page.data["posts"]
        assert [post["title"] for post in data["posts"]] == ["Post 3", "Post 4"]
        assert data["totalPosts"] == 5
        assert data["posts"][0]["creator"] == {"name": "A"}

        assert [post["title"] for post in last_page.data["posts"]["posts"]] == ["Post 5"]

    async def test_posts_created_in_the_same_instant_keep_insertion_order(
        self, execute, register_user, create_post
    ):
        user_id = await register_user()
        frozen = datetime(2026, 1, 1, tzinfo=UTC)
        with patch("blogql.dbmodels.utcnow", return_value=frozen):
            for number in range(1, 6):
                await create_post(user_id, title=f"Post {number}")

        pages = [await execute(POSTS, {"pages": page}, user_id=user_id) for page in (1, 2, 3)]

        titles = [post["title"] for page in pages for post in page.data["posts"]["posts"]]
        assert titles == ["Post 1", "Post 2", "Post 3", "Post 4", "Post 5"]

    async def test_page_past_the_end_is_empty(self, execute, register_user, create_post):
        user_id = await register_user()
        await create_post(user_id)

        result = await execute(POSTS, {"pages": 4}, user_id=user_id)

        assert result.data["posts"] == {"posts": [], "totalPosts": 1}

    @pytest.mark.parametrize("pages", [0, -1])
    async def test_page_below_one(self, execute, register_user, pages):
        user_id = await register_user()

        result = await execute(POSTS, {"pages": pages}, user_id=user_id)

        assert result.errors[0].extensions["status"] == 422

    async def test_requires_auth(self, execute):
        result = await execute(POSTS, {"pages": 1})

        assert result.errors[0].extensions["status"] == 401


class TestPostQuery:
    async def test_returns_post_with_creator(self, execute, register_user, create_post):
        user_id = await register_user()
        created = await create_post(user_id)

        result = await execute(POST, {"postId": created["_id"]}, user_id=user_id)

        assert result.errors is None
        post = result.data["post"]
        assert post["_id"] == created["_id"]
        assert post["imageUrl"] == "images/first.png"
        assert post["creator"] == {"_id": str(user_id), "email": "a@b.com"}
        assert post["createdAt"] == created["createdAt"]

    async def test_missing_post(self, execute, register_user):
        user_id = await register_user()

        result = await execute(POST, {"postId": str(uuid.uuid4())}, user_id=user_id)

        assert result.errors[0].message == "Could not find post."
        assert result.errors[0].extensions["status"] == 404

    async def test_malformed_id(self, execute, register_user):
        user_id = await register_user()

        result = await execute(POST, {"postId": "not-an-id"}, user_id=user_id)

        assert result.errors[0].extensions["status"] == 404

    async def test_requires_auth(self, execute, register_user, create_post):
        user_id = await register_user()
        created = await create_post(user_id)

        result = await execute(POST, {"postId": created["_id"]})

        assert result.errors[0].extensions["status"] == 401


class TestUpdatePost:
    async def test_owner_updates_and_keeps_image(self, execute, register_user, create_post):
        user_id = await register_user()
        created = await create_post(user_id)

        result = await execute(
            UPDATE_POST,
            {"id": created["_id"], "title": "Edited post", "content": "New content"},
            user_id=user_id,
        )

        assert result.errors is None
        updated = result.data["updatePost"]
        assert updated["title"] == "Edited post"
        assert updated["content"] == "New content"
        assert updated["imageUrl"] == "images/first.png"
        assert datetime.fromisoformat(updated["updatedAt"]) >= datetime.fromisoformat(
            created["updatedAt"]
        )

    async def test_owner_replaces_image(self, execute, register_user, create_post):
        user_id = await register_user()
        created = await create_post(user_id)

        result = await execute(
            UPDATE_POST,
            {
                "id": created["_id"],
                "title": "Edited post",
                "content": "New content",
                "imageUrl": "images/second.png",
            },
            user_id=user_id,
        )

        assert result.data["updatePost"]["imageUrl"] == "images/second.png"
        stored = await get_post(created["_id"])
        assert stored.image_url == "images/second.png"

    @pytest.mark.parametrize("image_url", ["", "   "])
    async def test_blank_image_is_rejected(self, execute, register_user, create_post, image_url):
        user_id = await register_user()
        created = await create_post(user_id)

        result = await execute(
            UPDATE_POST,
            {
                "id": created["_id"],
                "title": "Edited post",
                "content": "New content",
                "imageUrl": image_url,
            },
            user_id=user_id,
        )

        assert result.errors[0].extensions["status"] == 422
        assert result.errors[0].extensions["data"] == [{"message": "Image is invalid."}]
        stored = await get_post(created["_id"])
        assert stored.title == "First post"
        assert stored.image_url == "images/first.png"

    async def test_non_owner_is_rejected(self, execute, register_user, create_post):
        owner_id = await register_user("owner@b.com", "Owner")
        other_id = await register_user("other@b.com", "Other")
        created = await create_post(owner_id)

        result = await execute(
            UPDATE_POST,
            {"id": created["_id"], "title": "Hijacked", "content": "Hijacked"},
            user_id=other_id,
        )

        assert result.errors[0].message == "Not authorized."
        assert result.errors[0].extensions["status"] == 403
        stored = await get_post(created["_id"])
        assert stored.title == "First post"

    async def test_requires_auth(self, execute, register_user, create_post):
        user_id = await register_user()
        created = await create_post(user_id)

        result = await execute(
            UPDATE_POST, {"id": created["_id"], "title": "Edited post", "content": "New content"}
        )

        assert result.errors[0].extensions["status"] == 403

    async def test_missing_post(self, execute, register_user):
        user_id = await register_user()

        result = await execute(
            UPDATE_POST,
            {"id": str(uuid.uuid4()), "title": "Edited post", "content": "New content"},
            user_id=user_id,
        )

        assert result.errors[0].extensions["status"] == 404

    async def test_invalid_input(self, execute, register_user, create_post):
        user_id = await register_user()
        created = await create_post(user_id)

        result = await execute(
            UPDATE_POST,
            {"id": created["_id"], "title": "  ", "content": "New content"},
            user_id=user_id,
        )

        assert result.errors[0].extensions["status"] == 422
        assert result.errors[0].extensions["data"] == [{"message": "Title is invalid."}]
        stored = await get_post(created["_id"])
        assert stored.title == "First post"


class TestDeletePost:
    async def test_owner_deletes_post_and_image(self, execute, images, register_user, create_post):
        user_id = await register_user()
        created = await create_post(user_id)

        result = await execute(DELETE_POST, {"postId": created["_id"]}, user_id=user_id)

        assert result.errors is None
        assert result.data["deletePost"] is True
        assert await get_post(created["_id"]) is None
        assert await get_user_post_ids(user_id) == []
        images.clear_image.assert_awaited_once_with("images/first.png")

    async def test_writes_do_not_load_the_creators_posts(
        self, execute, register_user, create_post, executed_sql
    ):
        user_id = await register_user()
        first = await create_post(user_id)
        executed_sql.clear()

        await create_post(user_id, title="Second post")
        result = await execute(DELETE_POST, {"postId": first["_id"]}, user_id=user_id)

        assert result.data["deletePost"] is True
        collection_loads = [
            statement
            for statement in executed_sql
            if "posts.creator_id IN" in statement or "= posts.creator_id" in statement
        ]
        assert collection_loads == []

    async def test_non_owner_is_rejected(self, execute, images, register_user, create_post):
        owner_id = await register_user("owner@b.com", "Owner")
        other_id = await register_user("other@b.com", "Other")
        created = await create_post(owner_id)

        result = await execute(DELETE_POST, {"postId": created["_id"]}, user_id=other_id)

        assert result.errors[0].extensions["status"] == 403
        assert await get_post(created["_id"]) is not None
        assert await get_user_post_ids(owner_id) == [created["_id"]]
        images.clear_image.assert_not_awaited()

    async def test_requires_auth(self, execute, images, register_user, create_post):
        user_id = await register_user()
        created = await create_post(user_id)

        result = await execute(DELETE_POST, {"postId": created["_id"]})

        assert result.errors[0].extensions["status"] == 401
        assert await count_posts() == 1
        images.clear_image.assert_not_awaited()

    async def test_missing_post(self, execute, images, register_user):
        user_id = await register_user()

        result = await execute(DELETE_POST, {"postId": str(uuid.uuid4())}, user_id=user_id)

        assert result.errors[0].extensions["status"] == 404
        images.clear_image.assert_not_awaited()
