"""
Companies API: Pydantic Request/Response Schemas
=================================================

What:  Pydantic models defining the wire format of the companies collection.
How:   CompanyCreate decodes POST bodies; CompanyResponse serializes rows
       for GET responses. HealthResponse backs GET /health.

Decoding policy:
    Structural only. Field types are strict (a string is never coerced to an
    int), missing fields fall back to zero values, and unknown fields are
    dropped, which is how client-sent `id`, `when` or `createdAt` values are
    discarded. `floor` and `unit` must fit in a signed 64-bit integer.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer

from companies_api.exceptions import InvalidCompanyError

# Numbers are stored as signed 64-bit integers
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class CompanyCreate(BaseModel):
    """Fields a client may supply when creating a company."""

    name: str = ""
    description: str = ""
    floor: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX)
    unit: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX)

    model_config = ConfigDict(strict=True, extra="ignore")

    @classmethod
    def decode(cls, body: bytes) -> "CompanyCreate":
        """
        Decode a raw JSON body.

        Raises:
            InvalidCompanyError: with a single-line message built from the
                first decode errors (e.g. "Invalid JSON: EOF while parsing ...").
        """
        try:
            return cls.model_validate_json(body)
        except ValidationError as exc:
            raise InvalidCompanyError(
                message=format_decode_error(exc),
                context={"error_count": exc.error_count()},
            ) from exc


def format_decode_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


class CompanyResponse(BaseModel):
    """
    What:  Public representation of a stored company.
    Who:   Returned as the items of GET /companies.
    """

    id: str = Field(description="Server-generated identifier (24 hex chars)")
    name: str
    description: str
    floor: int
    unit: int
    when: datetime = Field(
        validation_alias="created_at",
        description="Creation timestamp (UTC ISO 8601)",
    )

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("when")
    def serialize_when(self, value: datetime) -> str:
        # Some backends (SQLite) hand back naive datetimes; they are stored as UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()


class HealthResponse(BaseModel):
    """Service health status returned by GET /health."""

    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float
