"""
Companies API: Scoped Session Adapter
======================================

What:  Adapter that gives every request its own database session and
       releases it when the request is done.
How:   1. Create an AsyncSession from the shared session factory and check
          out a pool connection for it
       2. Bind it to ctx.session
       3. Await the wrapped handler
       4. Unbind and close the session in `finally`: on success, on error
          responses, on raised exceptions, and on cancellation
When:  Once per request, innermost adapter before the method dispatcher.

Acquisition failure (pool exhausted, database unreachable) becomes a 500
plaintext response for that request only.
The adapter wraps the method dispatcher, so this applies to every method:
while the database is down, an unsupported method answers 500, not 405.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.responses import PlainTextResponse, Response

from companies_api.exceptions import error_message
from companies_api.middleware.adapters import Adapter, Handler, RequestContext

logger = logging.getLogger(__name__)


def with_session(session_factory: async_sessionmaker[AsyncSession]) -> Adapter:
    """
    Build an adapter that binds a fresh session from `session_factory`.

    Args:
        session_factory: Shared factory bound to the engine's connection pool.
                         Handlers only ever see the per-request session.
    """

    def adapter(handler: Handler) -> Handler:
        async def handle_with_session(ctx: RequestContext) -> Response:
            session = session_factory()
            try:
                try:
                    # Pool checkout; failures here are acquisition failures
                    await session.connection()
                except (SQLAlchemyError, OSError) as e:
                    logger.error("Could not acquire database session: %s", error_message(e))
                    return PlainTextResponse(error_message(e), status_code=500)

                ctx.session = session
                return await handler(ctx)
            finally:
                ctx.session = None
                await session.close()

        return handle_with_session

    return adapter
