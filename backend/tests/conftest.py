"""
Blog Backend — Test Configuration (conftest.py)
=================================================

Shared pytest fixtures for the test suite.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    ├── database: fresh in-memory Database with an empty schema
    ├── user_count: async callable counting rows in the users table
    ├── mock_db_session: AsyncMock session for error-path unit tests
    └── test_client: HTTPX AsyncClient bound to create_app(database=database)
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"

from app.database import Database  # noqa: E402
from app.models.user import User  # noqa: E402

IN_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def database():
    """
    A private in-memory store per test, schema freshly created.

    ASGITransport does not run the app lifespan, so the reset that startup
    would perform happens here.
    """
    db = Database(IN_MEMORY_URL)
    await db.reset()
    yield db
    await db.dispose()


@pytest.fixture
def user_count(database):
    """
    Counts stored users in a unit of work of its own.

    Usage:
        assert await user_count() == 1
    """

    async def count() -> int:
        async with database.session() as db:
            result = await db.execute(select(func.count(User.id)))
            return result.scalar() or 0

    return count


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
        await user_service.create_user(mock_db_session, ...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def alice_payload():
    return {"name": "Alice Smith", "email": "alice@example.com", "role": "user"}


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient routed directly into the app (no server).

    Usage:
        async def test_signup(test_client):
            response = await test_client.post("/users/signup", json={...})
    """
    from app.main import create_app

    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
