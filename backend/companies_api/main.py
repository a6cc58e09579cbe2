"""
Companies API: FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn companies_api.main:app`) or the `companies-api`
       console script (run()).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  /companies (adapter chain):                        │
    │  ┌──────────┐ ┌────────────┐ ┌─────────┐ ┌────────┐ │
    │  │  Req ID  │→│ Access Log │→│ Session │→│ handle │ │
    │  └──────────┘ └────────────┘ └─────────┘ └────────┘ │
    │                                                     │
    │  /health (FastAPI router)                           │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ CompaniesError → 500 │ Exception → 500       │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Verify the database (SELECT 1); failure aborts startup
    3. Create the schema when DB_CREATE_SCHEMA is set

    Shutdown:
    1. Dispose the database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from companies_api import __version__
from companies_api.config import settings
from companies_api.database import (
    async_session_factory,
    create_schema,
    dispose_engine,
    engine,
    verify_connection,
)
from companies_api.exceptions import CompaniesError, error_message
from companies_api.middleware.request_id import RequestIdFilter, request_id_var
from companies_api.routes import health
from companies_api.routes.companies import COLLECTION_PATH, build_companies_endpoint

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s
    The request ID comes from RequestIdFilter ("-" outside a request).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, database check, optional schema creation.
    Shutdown: dispose the engine.

    A database that cannot be reached at startup is fatal: the exception
    propagates and uvicorn exits without serving.
    """
    setup_logging()
    db_engine: AsyncEngine = app.state.engine
    logger.info("Companies API %s starting up...", __version__)

    try:
        await verify_connection(db_engine)
    except Exception:
        logger.critical("Cannot connect to the database at %s", db_engine.url, exc_info=True)
        raise

    if settings.db_create_schema:
        await create_schema(db_engine)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Companies API shutting down...")
    await dispose_engine(db_engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Fallback handlers for anything the operation handlers did not convert.

        CompaniesError (e.g. SessionNotBoundError) → 500 plaintext
        Exception (unexpected)                     → 500 plaintext
    """

    @app.exception_handler(CompaniesError)
    async def handle_companies_error(request: Request, exc: CompaniesError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return PlainTextResponse(exc.message, status_code=500)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(), str(exc), exc_info=True)
        return PlainTextResponse(error_message(exc), status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    db_engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        session_factory: Per-request session source; defaults to the module-level factory.
        db_engine: Engine checked and disposed by the lifespan; defaults to the module-level engine.
    """
    app = FastAPI(
        title="Companies API",
        description="Create and list company records.",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.session_factory = session_factory or async_session_factory
    app.state.engine = db_engine or engine

    register_exception_handlers(app)

    # Starlette route with no method list: every verb reaches the dispatcher.
    # Exact path only; /companies/ is a 404.
    app.add_route(
        COLLECTION_PATH,
        build_companies_endpoint(app.state.session_factory),
        include_in_schema=False,
    )
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve `app` with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "companies_api.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
