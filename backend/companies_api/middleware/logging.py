"""
Companies API: Access Log Adapter
==================================

What:  Logs one line per request: method, path, status, duration.
How:   Times the wrapped handler with time.perf_counter and picks the log
       level from the status code:
           5xx → ERROR
           4xx → WARNING
           2xx/3xx → INFO
When:  Inside the request ID adapter, so log lines carry the request ID.
       A handler that raises is logged with status 500.

Request bodies are never logged.
"""

import logging
import time

from starlette.responses import Response

from companies_api.middleware.adapters import Adapter, Handler, RequestContext

logger = logging.getLogger("companies.access")


def with_access_log() -> Adapter:
    """Build the access log adapter."""

    def adapter(handler: Handler) -> Handler:
        async def handle_with_access_log(ctx: RequestContext) -> Response:
            start_time = time.perf_counter()
            request = ctx.request
            client_ip = request.client.host if request.client else "unknown"

            status = 500
            try:
                response = await handler(ctx)
                status = response.status_code
                return response
            finally:
                duration_ms = (time.perf_counter() - start_time) * 1000
                if status >= 500:
                    log_level = logging.ERROR
                elif status >= 400:
                    log_level = logging.WARNING
                else:
                    log_level = logging.INFO

                logger.log(
                    log_level,
                    "%s %s %d %.1fms from %s",
                    request.method,
                    request.url.path,
                    status,
                    duration_ms,
                    client_ip,
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "status": status,
                        "duration_ms": round(duration_ms, 2),
                        "client_ip": client_ip,
                    },
                )

        return handle_with_access_log

    return adapter
