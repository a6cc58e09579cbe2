# Middleware package init
"""
Companies API: Middleware Package
===================================

What:  Adapters applied around the /companies handler.

Adapter Chain (order matters, first listed = outermost):
    Request → [Request ID] → [Access Log] → [Session] → Method dispatcher

    The order is reversed for responses:
    Response ← [Request ID] ← [Access Log] ← [Session] ← Method dispatcher

    This means:
    - The access log sees the final status, including 500s from session acquisition
    - The session is already closed when the access log line is written
"""

from companies_api.middleware.adapters import Adapter, Handler, RequestContext, adapt
from companies_api.middleware.logging import with_access_log
from companies_api.middleware.request_id import with_request_id
from companies_api.middleware.session import with_session

__all__ = [
    "Adapter",
    "Handler",
    "RequestContext",
    "adapt",
    "with_access_log",
    "with_request_id",
    "with_session",
]
