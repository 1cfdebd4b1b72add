"""
Auth GraphQL type definitions
"""

import strawberry


@strawberry.type
class AuthData:
    """Result of a successful login."""

    token: str
    user_id: str
