"""Authentication for blogql."""

from .context import AuthContext
from .credentials import AuthenticationError, CredentialService, TokenClaims
from .middleware import get_auth_context

__all__ = [
    "AuthContext",
    "AuthenticationError",
    "CredentialService",
    "TokenClaims",
    "get_auth_context",
]
