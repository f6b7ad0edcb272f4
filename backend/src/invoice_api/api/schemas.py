"""
Pydantic schemas for API responses.

These schemas define the JSON contract with clients. Field names are
snake_case in Python and camelCase on the wire.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from invoice_api.domain.models import Invoice


# =============================================================================
# Response Schemas
# =============================================================================

class InvoiceResponse(BaseModel):
    """A single invoice as returned to clients."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    created_at: datetime
    reference_month: int
    reference_year: int
    document: str
    description: str
    amount: float
    is_active: bool
    deactivated_at: datetime | None = Field(default=None, alias="deactiveAt")

    @classmethod
    def from_domain(cls, invoice: Invoice) -> "InvoiceResponse":
        return cls(
            id=invoice.id,
            created_at=invoice.created_at,
            reference_month=invoice.reference_month,
            reference_year=invoice.reference_year,
            document=invoice.document,
            description=invoice.description,
            amount=invoice.amount,
            is_active=invoice.is_active,
            deactivated_at=invoice.deactivated_at,
        )


class InvoiceListResponse(BaseModel):
    """Envelope for GET /invoices."""
    items: list[InvoiceResponse]


class InvoiceItemResponse(BaseModel):
    """Envelope for GET /invoices/{id}."""
    item: InvoiceResponse


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: str | None = None


class ErrorListResponse(BaseModel):
    """Validation error response listing every rejected parameter."""
    errors: list[str]
