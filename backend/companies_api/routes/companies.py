"""
Companies API: Companies Route Handlers
========================================

What:  The /companies resource: method dispatch plus the Insert and Read
       operations.
How:   Handlers are plain async functions of RequestContext. They are
       wrapped in the adapter chain by build_companies_endpoint() and the
       result is mounted as an ASGI endpoint accepting every method, so
       unsupported verbs reach handle() and get our own 405.

    POST /companies  → handle_insert → 307 /companies/<id>
    GET  /companies  → handle_read   → 200 JSON array
    *    /companies  → 405 "Not supported"

Errors are plaintext, single-line, and carry the raw underlying message.
"""

import logging

from pydantic_core import PydanticSerializationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response
from starlette.types import Receive, Scope, Send

from companies_api.exceptions import DatabaseError, InvalidCompanyError, error_message
from companies_api.middleware import (
    Handler,
    RequestContext,
    adapt,
    with_access_log,
    with_request_id,
    with_session,
)
from companies_api.schemas.company import CompanyCreate, CompanyResponse
from companies_api.services.company_service import company_service

logger = logging.getLogger(__name__)

COLLECTION_PATH = "/companies"


async def handle(ctx: RequestContext) -> Response:
    """Dispatch on the request method."""
    method = ctx.request.method
    if method == "GET":
        return await handle_read(ctx)
    if method == "POST":
        return await handle_insert(ctx)
    return PlainTextResponse("Not supported", status_code=405)


async def handle_insert(ctx: RequestContext) -> Response:
    """
    Decode the body, store it as a new company and redirect to it.

    Decode failures and write failures both answer 400 with the error text.
    """
    body = await ctx.request.body()
    try:
        payload = CompanyCreate.decode(body)
    except InvalidCompanyError as e:
        logger.warning("Rejected company payload: %s", e.message)
        return PlainTextResponse(e.message, status_code=400)

    try:
        company = await company_service.insert(ctx.db, payload)
    except DatabaseError as e:
        return PlainTextResponse(e.message, status_code=400)

    return RedirectResponse(url=f"{COLLECTION_PATH}/{company.id}", status_code=307)


async def handle_read(ctx: RequestContext) -> Response:
    """List the 100 most recent companies as a JSON array."""
    try:
        companies = await company_service.list_recent(ctx.db)
    except DatabaseError as e:
        return PlainTextResponse(e.message, status_code=500)

    try:
        content = [
            CompanyResponse.model_validate(company).model_dump(mode="json")
            for company in companies
        ]
        return JSONResponse(content=content)
    except (PydanticSerializationError, ValueError, TypeError) as e:
        logger.error("Failed to encode company listing: %s", str(e))
        return PlainTextResponse(error_message(e), status_code=500)


class CompaniesEndpoint:
    """
    ASGI endpoint for /companies.

    Mounted as a raw ASGI app so Starlette does not restrict methods; the
    dispatcher answers unsupported verbs itself. Each call creates a fresh
    RequestContext and runs the composed handler.
    """

    def __init__(self, handler: Handler):
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await self.handler(RequestContext(request=request))
        await response(scope, receive, send)


def build_companies_endpoint(session_factory: async_sessionmaker[AsyncSession]) -> CompaniesEndpoint:
    """
    Compose the /companies endpoint:
        request id → access log → session → handle
    """
    handler = adapt(
        handle,
        with_request_id(),
        with_access_log(),
        with_session(session_factory),
    )
    return CompaniesEndpoint(handler)
