"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from invoice_api.config import Settings
from invoice_api.domain.models import Invoice, InvoiceField, QueryOptions
from invoice_api.errors import InvoiceNotFoundError, RepositoryError
from invoice_api.infrastructure.repository import InvoiceRepository
from invoice_api.main import create_app

API_TOKEN = "sweetpotato"

_ATTRIBUTES = {
    InvoiceField.DOCUMENT: "document",
    InvoiceField.REFERENCE_MONTH: "reference_month",
    InvoiceField.REFERENCE_YEAR: "reference_year",
}


class FakeInvoiceRepository(InvoiceRepository):
    """In-memory repository that records which operations were called."""

    def __init__(self, invoices: list[Invoice] | None = None) -> None:
        self.invoices: dict[int, Invoice] = {}
        self.calls: list[str] = []
        self.last_options: QueryOptions | None = None
        for invoice in invoices or []:
            self._store(invoice)

    def _store(self, invoice: Invoice) -> int:
        invoice.id = invoice.id or len(self.invoices) + 1
        self.invoices[invoice.id] = invoice
        return invoice.id

    def _matching(self, options: QueryOptions) -> list[Invoice]:
        rows = [invoice for invoice in self.invoices.values() if invoice.is_active]
        for field, value in options.filters.items():
            rows = [row for row in rows if str(getattr(row, _ATTRIBUTES[field])) == value]
        return rows

    async def count(self, options: QueryOptions) -> int:
        self.calls.append("count")
        self.last_options = options
        return len(self._matching(options))

    async def list(self, options: QueryOptions) -> list[Invoice]:
        self.calls.append("list")
        self.last_options = options
        rows = self._matching(options)
        # stable sorts applied from the lowest priority key up
        for sort in reversed(options.sorts):
            rows.sort(key=lambda row: getattr(row, _ATTRIBUTES[sort.field]), reverse=sort.desc)
        start = options.pagination.offset
        return rows[start:start + options.pagination.limit]

    async def get_by_id(self, invoice_id: int) -> Invoice:
        self.calls.append("get_by_id")
        invoice = self.invoices.get(invoice_id)
        if invoice is None or not invoice.is_active:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    async def insert(self, invoice: Invoice) -> int:
        self.calls.append("insert")
        return self._store(invoice)

    async def soft_delete(self, invoice_id: int) -> int:
        self.calls.append("soft_delete")
        invoice = self.invoices.get(invoice_id)
        if invoice is None or not invoice.is_active:
            return 0
        invoice.is_active = False
        invoice.deactivated_at = datetime.now(timezone.utc)
        return 1

    async def update_description(self, invoice_id: int, description: str) -> int:
        self.calls.append("update_description")
        invoice = self.invoices.get(invoice_id)
        if invoice is None or not invoice.is_active:
            return 0
        invoice.description = description
        return 1


class FailingInvoiceRepository(FakeInvoiceRepository):
    """Repository whose reads fail after an optional successful count."""

    def __init__(self, invoices=None, fail_count: bool = True) -> None:
        super().__init__(invoices)
        self.fail_count = fail_count

    async def count(self, options: QueryOptions) -> int:
        if self.fail_count:
            self.calls.append("count")
            raise RepositoryError("connection refused")
        return await super().count(options)

    async def list(self, options: QueryOptions) -> list[Invoice]:
        self.calls.append("list")
        raise RepositoryError("connection reset")


def make_invoice(
    document: str = "DOC-0001",
    reference_month: int = 1,
    reference_year: int = 2024,
    amount: float = 100.0,
    description: str = "",
) -> Invoice:
    return Invoice(
        created_at=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        reference_month=reference_month,
        reference_year=reference_year,
        document=document,
        amount=amount,
        description=description,
    )


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, api_token=API_TOKEN)


@pytest.fixture
def sample_invoices() -> list[Invoice]:
    """Twelve invoices spread over 2023-2024 with repeating documents."""
    invoices = []
    for i in range(12):
        invoices.append(
            make_invoice(
                document=f"DOC-{i % 4:04d}",
                reference_month=i % 12 + 1,
                reference_year=2023 + i % 2,
                amount=10.0 * (i + 1),
            )
        )
    return invoices


@pytest.fixture
def repository(sample_invoices) -> FakeInvoiceRepository:
    return FakeInvoiceRepository(sample_invoices)


@pytest.fixture
def client(settings, repository) -> TestClient:
    return TestClient(create_app(settings=settings, repository=repository))
