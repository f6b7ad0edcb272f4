"""
Domain models for invoice records and listing queries.

These models are plain dataclasses with no I/O. The persistence layer maps
them to and from database rows; the API layer maps them to JSON.

Design Decisions:
- Invoice carries the soft-delete invariant in __post_init__
- QueryOptions is built fresh per request and never persisted
- Filter and sort fields come from the closed InvoiceField enum, so nothing
  outside that set can reach a query
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


# Maximum length of a document code, in Unicode code points
DOCUMENT_MAX_LENGTH = 14

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 5


class InvoiceField(str, Enum):
    """Invoice fields that can be filtered and sorted on."""
    DOCUMENT = "document"
    REFERENCE_MONTH = "referenceMonth"
    REFERENCE_YEAR = "referenceYear"

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass
class Invoice:
    """
    An invoice record.

    ``id`` is None until the record has been inserted. ``deactivated_at``
    is set exactly when ``is_active`` is False.
    """
    created_at: datetime
    reference_month: int
    reference_year: int
    document: str
    amount: float
    description: str = ""
    is_active: bool = True
    deactivated_at: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        """Validate field ranges and the soft-delete invariant."""
        if not 1 <= self.reference_month <= 12:
            raise ValueError(f"Invalid reference month: {self.reference_month}")
        if self.reference_year < 1:
            raise ValueError(f"Invalid reference year: {self.reference_year}")
        if (self.deactivated_at is None) != self.is_active:
            raise ValueError(
                "deactivated_at must be set if and only if the invoice is inactive"
            )


@dataclass(frozen=True)
class Sort:
    """A single ORDER BY directive."""
    field: InvoiceField
    desc: bool = False

    def __str__(self) -> str:
        direction = "DESC" if self.desc else "ASC"
        return f"{self.field.value} {direction}"


@dataclass(frozen=True)
class Pagination:
    """1-based page number and page size."""
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    def last_page(self, total: int) -> int:
        """
        Highest valid page for ``total`` matching records.

        0 when there are no records, and also when ``per_page`` is below 1,
        since no page of that size can hold a record.
        """
        if self.per_page < 1:
            return 0
        return math.ceil(total / self.per_page)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        return self.per_page


@dataclass
class QueryOptions:
    """
    Structured filters, sorts and pagination for a listing request.

    Sorts are ordered by priority: the first directive is the primary key.
    """
    filters: dict[InvoiceField, str] = field(default_factory=dict)
    sorts: list[Sort] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
