"""
Companies API: Package Initializer
===================================

What: Marks the `companies_api` directory as a Python package.
Who:  Used by uvicorn (`companies_api.main:app`), pytest, and the console script.

Architecture Note:

    ┌─────────────────────────────────────┐
    │     Routes (method dispatch)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Adapter chain (middleware)      │  ← request id, access log, session
    ├─────────────────────────────────────┤
    │     Services (database operations)  │  ← insert / list recent
    ├─────────────────────────────────────┤
    │     Models & Schemas (data)         │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
