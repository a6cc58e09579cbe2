"""
Companies API: Request ID Adapter
==================================

What:  Assigns a correlation ID to each request and returns it in the
       X-Request-ID response header.
How:   Uses the client's X-Request-ID header when present, otherwise a short
       UUID. The ID is stored on the RequestContext and in a ContextVar so
       every log line emitted while the request runs can include it
       (see RequestIdFilter).
When:  Outermost adapter in the /companies chain.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.responses import Response

from companies_api.middleware.adapters import Adapter, Handler, RequestContext

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on the same event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Attach the current request ID to every log record as `request_id`."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


def with_request_id() -> Adapter:
    """Build the request ID adapter."""

    def adapter(handler: Handler) -> Handler:
        async def handle_with_request_id(ctx: RequestContext) -> Response:
            rid = ctx.request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
            ctx.request_id = rid
            token = request_id_var.set(rid)
            try:
                response = await handler(ctx)
            finally:
                request_id_var.reset(token)

            response.headers[REQUEST_ID_HEADER] = rid
            return response

        return handle_with_request_id

    return adapter
