"""Request authentication: turns the Authorization header into an AuthContext."""

from __future__ import annotations

from ..logging import get_logger
from .context import AuthContext
from .credentials import AuthenticationError, CredentialService

logger = get_logger(__name__)


def get_auth_context(authorization: str | None, credentials: CredentialService) -> AuthContext:
    """
    Extract authentication context from the Authorization header.

    A missing header, a non-Bearer scheme, an empty token or a token that
    fails verification all produce an unauthenticated context; resolvers
    decide whether that is acceptable for the operation.

    Args:
        authorization: Authorization header value (``Bearer <token>``)
        credentials: Service used to verify the token

    Returns:
        AuthContext for the request
    """
    if not authorization:
        return AuthContext.anonymous()

    if not authorization.startswith("Bearer "):
        logger.warning("Invalid authorization format received")
        return AuthContext.anonymous()

    token = authorization[7:].strip()
    if not token:
        logger.warning("Empty token provided")
        return AuthContext.anonymous()

    try:
        claims = credentials.decode_token(token)
    except AuthenticationError as e:
        logger.info("Request treated as unauthenticated", reason=str(e))
        return AuthContext.anonymous()

    return AuthContext(user_id=claims.user_id, email=claims.email, token=token)
