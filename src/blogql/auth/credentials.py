"""Password hashing and token issuance."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from jwt.exceptions import InvalidTokenError
from passlib.context import CryptContext

from ..logging import get_logger

logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Raised when a bearer token cannot be verified."""

    pass


@dataclass(frozen=True)
class TokenClaims:
    """Claims carried by an issued token."""

    user_id: UUID
    email: str
    issued_at: datetime
    expires_at: datetime


class CredentialService:
    """Hashes passwords and issues/verifies self-signed JWTs.

    The signing secret is injected by the application at startup.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        token_expiry_seconds: int = 3600,
        hash_rounds: int = 12,
    ):
        if not secret_key:
            raise ValueError("A JWT signing secret is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.token_expiry_seconds = token_expiry_seconds
        self._pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=hash_rounds
        )

    def hash_password(self, plaintext: str) -> str:
        """Hash a password."""
        return self._pwd_context.hash(plaintext)

    def verify_password(self, plaintext: str, hashed: str) -> bool:
        """Verify a password against its hash."""
        return self._pwd_context.verify(plaintext, hashed)

    def issue_token(self, user_id: UUID | str, email: str) -> str:
        """Issue a signed token for the given user, valid for ``token_expiry_seconds``."""
        now = datetime.now(UTC).replace(microsecond=0)
        payload = {
            "userId": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + timedelta(seconds=self.token_expiry_seconds),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """Verify a token and return its claims."""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except InvalidTokenError as e:
            logger.warning("JWT token validation failed", error=str(e))
            raise AuthenticationError("Invalid token") from e

        user_id = payload.get("userId")
        email = payload.get("email")
        if not user_id or not email:
            raise AuthenticationError("Missing 'userId' or 'email' claim in token")

        try:
            parsed_user_id = UUID(str(user_id))
        except ValueError as e:
            raise AuthenticationError("Malformed 'userId' claim in token") from e

        return TokenClaims(
            user_id=parsed_user_id,
            email=email,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
