"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from blogql.auth.context import AuthContext
from blogql.auth.credentials import CredentialService
from blogql.storage import ImageStore

TEST_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def credentials() -> CredentialService:
    """Credential service with the cheapest bcrypt cost to keep tests fast."""
    return CredentialService(secret_key=TEST_SECRET, hash_rounds=4)


@pytest.fixture
def images() -> MagicMock:
    """Image store double that records deletions instead of touching disk."""
    store = MagicMock(spec=ImageStore)
    store.clear_image = AsyncMock(return_value=True)
    return store


@pytest_asyncio.fixture
async def sqlite_database(tmp_path: Path) -> AsyncGenerator[str, None]:
    """Point the shared engine at a fresh SQLite file with all tables created."""
    from blogql.database.connection import dispose_database, get_async_engine, init_database
    from blogql.dbmodels import Base

    dsn = f"sqlite:///{tmp_path / 'blogql-test.db'}"
    os.environ["BLOGQL_DATABASE_URL"] = dsn
    init_database(dsn, force_reinit=True)

    async with get_async_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield dsn

    await dispose_database()


@pytest.fixture
def make_context(credentials: CredentialService, images: MagicMock):
    """Build a resolver context for an (optionally) authenticated caller."""

    def _make(user_id: Any = None, email: str | None = None) -> dict[str, Any]:
        return {
            "auth": AuthContext(user_id=user_id, email=email),
            "credentials": credentials,
            "images": images,
        }

    return _make


@pytest.fixture
def execute(make_context):
    """Execute a GraphQL document against the schema."""
    from blogql.graphql.schema import schema

    async def _execute(
        query: str,
        variables: dict[str, Any] | None = None,
        user_id: Any = None,
    ):
        return await schema.execute(
            query,
            variable_values=variables,
            context_value=make_context(user_id=user_id),
        )

    return _execute


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")  # type: ignore[reportUnknownMemberType]
    config.addinivalue_line("markers", "unit: mark test as unit test")  # type: ignore[reportUnknownMemberType]
