"""
Companies API: Resource Adapter Chain
======================================

What:  Types and a composition function for wrapping a request handler in
       cross-cutting adapters (middleware).
How:   A Handler is an async function taking the per-request RequestContext
       and returning a Response. An Adapter takes a Handler and returns a new
       Handler that adds behavior before and/or after delegating to it.

Ordering:
    adapt(handler, a, b, c) builds a(b(c(handler))).

        Request  → a → b → c → handler
        Response ← a ← b ← c ← handler

    The FIRST adapter listed is the OUTERMOST layer: its pre-logic runs first
    and its post-logic runs last.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request
from starlette.responses import Response

from companies_api.exceptions import SessionNotBoundError


@dataclass
class RequestContext:
    """
    Per-request state threaded explicitly through the handler chain.

    Lives exactly as long as one inbound request. Adapters fill in fields
    (request_id, session) before delegating and clear them afterwards.
    """

    request: Request
    request_id: str = ""
    session: Optional[AsyncSession] = None

    @property
    def db(self) -> AsyncSession:
        """The bound database session; raises SessionNotBoundError if absent."""
        if self.session is None:
            raise SessionNotBoundError(context={"path": self.request.url.path})
        return self.session


Handler = Callable[[RequestContext], Awaitable[Response]]
Adapter = Callable[[Handler], Handler]


def adapt(handler: Handler, *adapters: Adapter) -> Handler:
    """
    Wrap `handler` in `adapters`, first adapter outermost.

    Pure composition: nothing runs until the returned handler is awaited.
    With no adapters the handler is returned unchanged.
    """
    for adapter in reversed(adapters):
        handler = adapter(handler)
    return handler
