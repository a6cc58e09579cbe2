"""
Companies API: Company Service
===============================

What:  Database operations behind the companies collection.
How:   Stateless; every call receives the request's AsyncSession.
Who:   Called by the Insert/Read handlers in companies_api.routes.companies.

    insert()       → assign id + created_at, INSERT, COMMIT
    list_recent()  → SELECT ... ORDER BY created_at DESC LIMIT 100

Failures are wrapped in DatabaseError carrying the raw driver message; the
handler decides the HTTP status. Nothing is retried.
"""

import logging
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from companies_api.exceptions import DatabaseError, error_message
from companies_api.models.company import Company, new_company_id, utcnow
from companies_api.schemas.company import CompanyCreate

logger = logging.getLogger(__name__)

# Listings always return the most recent records only
LIST_LIMIT = 100


class CompanyService:
    """Business logic layer for company records."""

    async def insert(self, db: AsyncSession, payload: CompanyCreate) -> Company:
        """
        Persist a new company.

        `id` and `created_at` are always generated here; CompanyCreate has no
        such fields, so client values never reach the row.

        Raises:
            DatabaseError: the INSERT or COMMIT failed (transaction rolled back)
        """
        company = Company(
            id=new_company_id(),
            name=payload.name,
            description=payload.description,
            floor=payload.floor,
            unit=payload.unit,
            created_at=utcnow(),
        )
        try:
            db.add(company)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error inserting company %s: %s", company.id, str(e))
            raise DatabaseError(
                message=error_message(e),
                context={"operation": "insert", "company_id": company.id},
            ) from e

        logger.info("Company created: %s", company.id)
        return company

    async def list_recent(self, db: AsyncSession, limit: int = LIST_LIMIT) -> List[Company]:
        """
        Return up to `limit` companies, newest first.

        Raises:
            DatabaseError: the query failed
        """
        query = select(Company).order_by(desc(Company.created_at)).limit(limit)
        try:
            result = await db.execute(query)
            companies = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing companies: %s", str(e), exc_info=True)
            raise DatabaseError(
                message=error_message(e),
                context={"operation": "list", "limit": limit},
            ) from e

        logger.debug("Listed %d companies", len(companies))
        return companies


# Singleton instance; the service holds no state
company_service = CompanyService()
