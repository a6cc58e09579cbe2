"""
Companies API: Application Wiring Tests
========================================

What:  Health check, fallback exception handling and startup behavior.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from starlette.responses import PlainTextResponse

from companies_api.exceptions import SessionNotBoundError
from companies_api.main import create_app, lifespan
from companies_api.routes import companies as companies_routes


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unreachable_database(self, tmp_path):
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}", poolclass=NullPool
        )
        app = create_app(session_factory=async_sessionmaker(engine), db_engine=engine)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        await engine.dispose()

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestUnreachableDatabase:

    @pytest.mark.asyncio
    async def test_companies_returns_500_and_keeps_serving(self, tmp_path):
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}", poolclass=NullPool
        )
        app = create_app(session_factory=async_sessionmaker(engine), db_engine=engine)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            first = await client.get("/companies")
            second = await client.post("/companies", json={"name": "Acme"})
        await engine.dispose()

        assert first.status_code == 500
        assert second.status_code == 500

    @pytest.mark.asyncio
    async def test_unsupported_method_returns_500_while_database_down(self, tmp_path):
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}", poolclass=NullPool
        )
        app = create_app(session_factory=async_sessionmaker(engine), db_engine=engine)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.delete("/companies")
        await engine.dispose()

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_startup_fails_without_database(self, tmp_path):
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}", poolclass=NullPool
        )
        app = create_app(session_factory=async_sessionmaker(engine), db_engine=engine)

        with pytest.raises(Exception):
            async with lifespan(app):
                pass
        await engine.dispose()


class TestStartup:

    @pytest.mark.asyncio
    async def test_lifespan_creates_schema(self, tmp_path):
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}", poolclass=NullPool
        )
        factory = async_sessionmaker(engine, expire_on_commit=False)
        app = create_app(session_factory=factory, db_engine=engine)

        async with lifespan(app):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                response = await client.get("/companies")

        assert response.status_code == 200
        assert response.json() == []


class TestSessionNotBound:

    @pytest.mark.asyncio
    async def test_handler_without_session_adapter_is_a_server_error(self, make_context):
        """Mounting handle() without with_session() fails loudly, not as a client error."""
        with pytest.raises(SessionNotBoundError):
            await companies_routes.handle(make_context("GET"))

    @pytest.mark.asyncio
    async def test_unsupported_method_needs_no_session(self, make_context):
        response = await companies_routes.handle(make_context("DELETE"))

        assert isinstance(response, PlainTextResponse)
        assert response.status_code == 405
        assert response.body == b"Not supported"
