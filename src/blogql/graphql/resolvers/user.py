from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from uuid import uuid4

import strawberry
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ...database.connection import get_async_session
from ...dbmodels import DEFAULT_STATUS, Users, utcnow
from ...errors import ConflictError, NotFoundError, UnauthorizedError
from ...logging import get_logger
from ..access_control import get_auth_context_from_info, get_credentials_from_info, require_auth
from ..validation import raise_if_invalid, validate_registration

if TYPE_CHECKING:
    from ..mutations.root import UserInputData
    from ..types.auth import AuthData
    from ..types.user import User

logger = get_logger(__name__)


def to_user_type(user: Users) -> User:
    """Map a Users row onto the GraphQL User type."""
    from ..types.user import User as UserType

    return UserType(
        id=strawberry.ID(str(user.id)),
        email=user.email,
        name=user.name,
        status=user.status,
    )


# Mutation resolvers
async def create_user(info: strawberry.Info, user_input: UserInputData) -> User:
    """
    Register a new user.

    Validates email/password, rejects duplicate emails and stores the
    password as a bcrypt hash.
    """
    raise_if_invalid(validate_registration(user_input.email, user_input.password))
    credentials = get_credentials_from_info(info)

    async with get_async_session() as session:
        stmt = select(Users).where(Users.email == user_input.email)
        result = await session.execute(stmt)
        if result.scalar_one_or_none() is not None:
            logger.info("Registration rejected: email already registered")
            raise ConflictError("User exists already!")

        password_hash = await asyncio.to_thread(credentials.hash_password, user_input.password)

        now = utcnow()
        user = Users(
            id=uuid4(),
            email=user_input.email,
            name=user_input.name,
            password_hash=password_hash,
            status=DEFAULT_STATUS,
            created_at=now,
            updated_at=now,
        )
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as e:
            # Lost a race against a concurrent registration with the same email
            raise ConflictError("User exists already!") from e

        logger.info("User registered", new_user_id=str(user.id))
        return to_user_type(user)


async def update_status(info: strawberry.Info, status: str) -> User:
    """Set the free-text status of the authenticated user."""
    auth_context = require_auth(get_auth_context_from_info(info), status_code=401)

    async with get_async_session() as session:
        user = await session.get(Users, auth_context.user_id)
        if not user:
            raise NotFoundError("User could not be found.")

        user.status = status
        user.updated_at = utcnow()
        await session.flush()

        logger.info("User status updated")
        return to_user_type(user)


# Query resolvers
async def login(info: strawberry.Info, email: str, password: str) -> AuthData:
    """
    Exchange email and password for a signed token.

    Raises NotFoundError (404) for an unknown email and UnauthorizedError (401)
    for a wrong password; no token is issued in either case.
    """
    credentials = get_credentials_from_info(info)

    async with get_async_session() as session:
        stmt = select(Users).where(Users.email == email)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            logger.info("Login failed: unknown email")
            raise NotFoundError("A user with this email could not be found.")

        is_equal = await asyncio.to_thread(
            credentials.verify_password, password, user.password_hash
        )
        if not is_equal:
            logger.info("Login failed: wrong password", login_user_id=str(user.id))
            raise UnauthorizedError("Password is incorrect.")

        token = credentials.issue_token(user.id, user.email)

        from ..types.auth import AuthData as AuthDataType

        return AuthDataType(token=token, user_id=str(user.id))


async def resolve_current_user(info: strawberry.Info) -> User:
    """Resolve the authenticated user."""
    auth_context = require_auth(get_auth_context_from_info(info), status_code=401)

    async with get_async_session() as session:
        user = await session.get(Users, auth_context.user_id)
        if not user:
            raise NotFoundError("User could not be found.")

        return to_user_type(user)
