"""
Companies API: Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for the error scenarios of the
       companies collection.
How:   Each exception carries a message and an optional context dict.
       The Insert/Read handlers convert them to plaintext HTTP responses;
       anything else reaches the global handler registered in main.py.

Exception Hierarchy:
    CompaniesError (base)
    ├── InvalidCompanyError   → 400 Bad Request (body could not be decoded)
    ├── DatabaseError         → 400 on insert, 500 on read
    └── SessionNotBoundError  → programming error (session adapter not applied)

Messages are the raw underlying error text. The API exposes them verbatim;
there is no structured error envelope.
"""

from typing import Any, Dict, Optional


class CompaniesError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Error description returned to the client as the response body
        context:  Additional debug info (logged only)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidCompanyError(CompaniesError):
    """
    Raised when a request body cannot be decoded into a company record.

    When:  Malformed JSON, a non-object document, or a field of the wrong type.
    HTTP:  400 Bad Request
    """

    def __init__(
        self,
        message: str = "Invalid company payload",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CompaniesError):
    """
    Raised when an insert or a query fails.

    Transient and permanent failures are not distinguished. The handler picks
    the status: 400 for the insert path, 500 for the read path.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SessionNotBoundError(CompaniesError):
    """
    Raised when a handler asks for the database session but none is bound.

    This means the handler was mounted without the session adapter. It is a
    wiring bug, not a client error, and is left to the global handler.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="No database session bound to this request; "
                    "is the handler wrapped with with_session()?",
            context=context,
        )


def error_message(exc: BaseException) -> str:
    """
    Single-line text of an underlying error.

    SQLAlchemy appends "[SQL: ...]" and a documentation link on further
    lines; only the first line (driver error class and message) is kept.
    """
    lines = str(exc).strip().splitlines()
    return lines[0] if lines else type(exc).__name__
