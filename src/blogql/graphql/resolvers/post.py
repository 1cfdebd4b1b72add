from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import strawberry
from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from ...config import settings
from ...database.connection import get_async_session
from ...dbmodels import Posts, Users, next_created_at, utcnow
from ...errors import NotFoundError
from ...logging import get_logger
from ..access_control import (
    ensure_post_owner,
    get_auth_context_from_info,
    get_image_store_from_info,
    require_auth,
)
from ..validation import (
    raise_if_invalid,
    validate_image_url,
    validate_page,
    validate_post_input,
)
from .user import to_user_type

if TYPE_CHECKING:
    from ..mutations.root import PostInputData
    from ..types.post import Post, PostData
    from ..types.user import User

logger = get_logger(__name__)


def to_isoformat(value: datetime) -> str:
    """Serialize a timestamp as ISO-8601 in UTC (naive values are taken as UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def parse_id(value: str) -> UUID | None:
    try:
        return UUID(str(value))
    except ValueError:
        return None


def to_post_type(post: Posts) -> Post:
    """Map a Posts row (with creator loaded) onto the GraphQL Post type."""
    from ..types.post import Post as PostType

    return PostType(
        id=strawberry.ID(str(post.id)),
        title=post.title,
        content=post.content,
        image_url=post.image_url,
        creator=to_user_type(post.creator),
        created_at=to_isoformat(post.created_at),
        updated_at=to_isoformat(post.updated_at),
    )


async def _get_post_with_creator(session, post_id: str) -> Posts:
    parsed_id = parse_id(post_id)
    post = None
    if parsed_id is not None:
        stmt = select(Posts).where(Posts.id == parsed_id).options(selectinload(Posts.creator))
        result = await session.execute(stmt)
        post = result.scalar_one_or_none()

    if not post:
        logger.info("Post not found", post_id=str(post_id))
        raise NotFoundError("Could not find post.")
    return post


# Query resolvers
async def resolve_posts(info: strawberry.Info, pages: int) -> PostData:
    """
    Resolve one page of posts in store order (oldest first).

    Page numbers are 1-based; the page size comes from settings.
    """
    require_auth(get_auth_context_from_info(info), status_code=401)
    raise_if_invalid(validate_page(pages))

    per_page = settings.posts_per_page

    async with get_async_session() as session:
        total_posts = await session.scalar(select(func.count()).select_from(Posts))

        stmt = (
            select(Posts)
            .options(selectinload(Posts.creator))
            .order_by(Posts.created_at.asc(), Posts.id.asc())
            .offset((pages - 1) * per_page)
            .limit(per_page)
        )
        result = await session.execute(stmt)
        posts = result.scalars().all()

        from ..types.post import PostData as PostDataType

        return PostDataType(
            posts=[to_post_type(post) for post in posts],
            total_posts=total_posts or 0,
        )


async def resolve_post_by_id(info: strawberry.Info, post_id: str) -> Post:
    """Resolve a single post with its creator."""
    require_auth(get_auth_context_from_info(info), status_code=401)

    async with get_async_session() as session:
        post = await _get_post_with_creator(session, post_id)
        return to_post_type(post)


async def resolve_user_posts(user: User, info: strawberry.Info) -> list[Post]:
    """Resolve the posts created by a user, oldest first."""
    _ = info
    user_id = parse_id(user.id)
    if user_id is None:
        return []

    async with get_async_session() as session:
        stmt = (
            select(Posts)
            .where(Posts.creator_id == user_id)
            .options(selectinload(Posts.creator))
            .order_by(Posts.created_at.asc(), Posts.id.asc())
        )
        result = await session.execute(stmt)
        return [to_post_type(post) for post in result.scalars().all()]


# Mutation resolvers
async def create_post(info: strawberry.Info, post_input: PostInputData) -> Post:
    """
    Create a post owned by the authenticated user.

    Only the creator row is loaded, not its post collection; the foreign key
    ties the new row to its creator.
    """
    auth_context = require_auth(get_auth_context_from_info(info), status_code=403)
    raise_if_invalid(
        validate_post_input(post_input.title, post_input.content)
        + validate_image_url(post_input.image_url)
    )

    async with get_async_session() as session:
        user = await session.get(Users, auth_context.user_id)
        if not user:
            raise NotFoundError("User could not be found.")

        now = next_created_at()
        post = Posts(
            id=uuid4(),
            title=post_input.title,
            content=post_input.content,
            image_url=post_input.image_url,
            creator=user,
            created_at=now,
            updated_at=now,
        )
        session.add(post)
        await session.flush()

        logger.info("Post created", post_id=str(post.id))
        return to_post_type(post)


async def update_post(info: strawberry.Info, id: str, post_input: PostInputData) -> Post:
    """
    Update title and content of a post owned by the authenticated user.

    An omitted ``imageUrl`` keeps the stored image; a blank one is invalid.
    """
    auth_context = require_auth(get_auth_context_from_info(info), status_code=403)
    errors = validate_post_input(post_input.title, post_input.content)
    if post_input.image_url is not None:
        errors += validate_image_url(post_input.image_url)
    raise_if_invalid(errors)

    async with get_async_session() as session:
        post = await _get_post_with_creator(session, id)
        ensure_post_owner(post, auth_context)

        post.title = post_input.title
        post.content = post_input.content
        if post_input.image_url is not None:
            post.image_url = post_input.image_url
        post.updated_at = utcnow()
        await session.flush()

        logger.info("Post updated", post_id=str(post.id))
        return to_post_type(post)


async def delete_post(info: strawberry.Info, post_id: str) -> bool:
    """
    Delete a post owned by the authenticated user.

    Removing the row also removes it from the creator's posts; the stored
    image is removed after the commit.
    """
    auth_context = require_auth(get_auth_context_from_info(info), status_code=401)
    images = get_image_store_from_info(info)

    async with get_async_session() as session:
        post = await _get_post_with_creator(session, post_id)
        ensure_post_owner(post, auth_context)

        image_url = post.image_url
        await session.delete(post)
        await session.flush()

    logger.info("Post deleted", post_id=str(post_id))
    await images.clear_image(image_url)
    return True
