"""
Student Records — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── database: in-memory SQLite store with the students table created
    ├── db_session: AsyncSession on that store, for service-level tests
    ├── test_client: HTTPX AsyncClient talking to an app built on `database`
    ├── broken_client: AsyncClient whose store cannot be opened
    ├── mock_db_session: AsyncMock session for simulating driver failures
    └── sample_student_data: one valid create payload
"""

import os

# Override settings for testing BEFORE any application imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from student_records.database import Database  # noqa: E402
from student_records.main import create_app  # noqa: E402


def make_in_memory_database() -> Database:
    """
    One shared in-memory SQLite connection.

    StaticPool keeps every session on the same connection, so the data
    written by one request is visible to the next.
    """
    return Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    db = make_in_memory_database()
    await db.create_tables()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """A session on the test store; committed by the test when needed."""
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(database) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed directly into the ASGI app.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/students")
            assert response.status_code == 200
    """
    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def broken_client(tmp_path) -> AsyncGenerator[AsyncClient, None]:
    """Client for an app whose SQLite file lives in a directory that does not exist."""
    broken = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'students.db'}")
    app = create_app(database=broken)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await broken.dispose()


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get(mock_db_session):
            result = MagicMock()
            result.scalar_one_or_none.return_value = None
            mock_db_session.execute.return_value = result
            with pytest.raises(NotFoundError):
                await student_service.get_student(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_student_data():
    """A valid POST /students body."""
    return {
        "student_id": 101,
        "name": "Ana Lima",
        "dob": "2001-05-14",
        "marks": 88.5,
    }
