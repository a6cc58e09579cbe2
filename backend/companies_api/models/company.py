"""
Companies API: Company SQLAlchemy Model
========================================

What:  ORM model representing the `companies` table.
Who:   Written by CompanyService.insert, read by CompanyService.list_recent.

Table Design:
    - id: 24 lowercase hex characters, generated in Python at insert time
    - name / description / floor / unit: stored exactly as the client sent them
      (floor and unit as BIGINT)
    - created_at: UTC with timezone, the only sort key for listings

    Index on created_at DESC serves the listing query
    (ORDER BY created_at DESC LIMIT 100).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from companies_api.database import Base

COMPANY_ID_LENGTH = 24


def new_company_id() -> str:
    """Return a fresh 24-hex-character identifier (96 random bits)."""
    return uuid.uuid4().hex[:COMPANY_ID_LENGTH]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Company(Base):
    """
    A company record.

    Lifecycle:
        Created by the Insert operation and never updated or deleted by
        this service. `id` and `created_at` are always server assigned.
    """

    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(
        String(COMPANY_ID_LENGTH),
        primary_key=True,
        default=new_company_id,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    floor: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    unit: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Exposed as `when` in the JSON representation
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("idx_companies_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name='{self.name}', created_at='{self.created_at}')>"
