"""
Companies API: Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:  AsyncMock standing in for AsyncSession (unit tests)
    ├── make_context:     builds a RequestContext around a bare Starlette Request
    ├── db_engine:        file-backed SQLite (aiosqlite) engine with the schema created
    ├── session_tracker:  counts sessions opened/closed through the tracked factory
    ├── session_factory:  async_sessionmaker over db_engine producing tracked sessions
    └── test_client:      HTTPX AsyncClient wired to a fresh app
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="companies_test_"), "default.db"
)
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DB_CREATE_SCHEMA"] = "true"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from starlette.requests import Request

from companies_api.database import create_schema
from companies_api.middleware.adapters import RequestContext


class SessionTracker:
    """Counts sessions handed out by a tracked session factory."""

    def __init__(self):
        self.opened = 0
        self.closed = 0

    @property
    def open_sessions(self) -> int:
        return self.opened - self.closed


def tracked_session_factory(engine, tracker: SessionTracker) -> async_sessionmaker:
    """async_sessionmaker whose sessions report creation and close() to `tracker`."""

    class TrackedSession(AsyncSession):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            tracker.opened += 1

        async def close(self) -> None:
            tracker.closed += 1
            await super().close()

    return async_sessionmaker(engine, class_=TrackedSession, expire_on_commit=False)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_list(mock_db_session):
            mock_db_session.execute.return_value.scalars.return_value.all.return_value = []
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.connection = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_context():
    """Factory for RequestContext objects wrapping a minimal HTTP scope."""

    def _make(method: str = "GET", path: str = "/companies", headers=None) -> RequestContext:
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [
                (k.lower().encode("latin-1"), v.encode("latin-1"))
                for k, v in (headers or {}).items()
            ],
            "client": ("127.0.0.1", 50000),
            "server": ("test", 80),
            "scheme": "http",
        }
        return RequestContext(request=Request(scope))

    return _make


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """
    A fresh SQLite database per test, schema created.

    NullPool: every session opens its own connection, so concurrent requests
    really use separate connections.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'companies.db'}",
        poolclass=NullPool,
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_tracker():
    return SessionTracker()


@pytest.fixture
def session_factory(db_engine, session_tracker):
    return tracked_session_factory(db_engine, session_tracker)


@pytest_asyncio.fixture
async def test_client(db_engine, session_factory):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/companies")
            assert response.status_code == 200
    """
    from companies_api.main import create_app

    app = create_app(session_factory=session_factory, db_engine=db_engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
