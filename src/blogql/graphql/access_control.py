"""
Shared access control logic for GraphQL resolvers
"""

from typing import TYPE_CHECKING

import strawberry

from ..auth.context import AuthContext
from ..errors import NotAuthenticatedError, NotAuthorizedError
from ..logging import get_logger

if TYPE_CHECKING:
    from ..auth.credentials import CredentialService
    from ..dbmodels import Posts
    from ..storage import ImageStore

logger = get_logger(__name__)


def get_auth_context_from_info(info: strawberry.Info) -> AuthContext:
    """
    Extract auth context from GraphQL info object.

    Requests whose context carries no auth information are unauthenticated.
    """
    auth_context = info.context.get("auth")
    if auth_context is None:
        logger.debug("No auth context found in GraphQL context")
        return AuthContext.anonymous()
    return auth_context


def get_credentials_from_info(info: strawberry.Info) -> "CredentialService":
    credentials = info.context.get("credentials")
    if credentials is None:
        raise RuntimeError("Credential service not configured in GraphQL context")
    return credentials


def get_image_store_from_info(info: strawberry.Info) -> "ImageStore":
    images = info.context.get("images")
    if images is None:
        raise RuntimeError("Image store not configured in GraphQL context")
    return images


def require_auth(auth_context: AuthContext, status_code: int) -> AuthContext:
    """
    Ensure the request is authenticated.

    Args:
        auth_context: The authentication context of the request
        status_code: Status reported to the client when it is not

    Raises:
        NotAuthenticatedError: If the request carries no valid token
    """
    if not auth_context.is_auth:
        raise NotAuthenticatedError(status_code=status_code)
    return auth_context


def is_post_owner(post: "Posts", auth_context: AuthContext) -> bool:
    """Check whether the authenticated user created the post."""
    if not auth_context.is_auth:
        return False
    return post.creator_id == auth_context.user_id


def ensure_post_owner(post: "Posts", auth_context: AuthContext) -> None:
    """
    Ensure the authenticated user created the post.

    Raises:
        NotAuthorizedError: If someone else created it
    """
    if not is_post_owner(post, auth_context):
        logger.info(
            "Access denied to post",
            post_id=str(post.id),
            user_id=str(auth_context.user_id) if auth_context.user_id else None,
        )
        raise NotAuthorizedError()
