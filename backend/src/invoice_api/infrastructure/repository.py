"""
Invoice repository: the storage capability used by the API.

The abstract ``InvoiceRepository`` is what routes and the listing service
depend on. ``SQLAlchemyInvoiceRepository`` implements it on top of an
async session factory.

Design Decisions:
- Filters and sorts are translated to column expressions, never to SQL
  text, so filter values always travel as bound parameters
- Every read is restricted to active rows
- Integers outside the column range never reach the database: they match
  nothing, so lookups by such an id report not found
- Any SQLAlchemy failure is re-raised as RepositoryError; nothing retries
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import Select, false, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from invoice_api.domain.models import Invoice, InvoiceField, QueryOptions
from invoice_api.domain.validation import parse_int
from invoice_api.errors import InvoiceNotFoundError, RepositoryError

from .database import InvoiceRecord, fits_integer_column

logger = logging.getLogger(__name__)


class InvoiceRepository(ABC):
    """Abstract interface for invoice storage."""

    @abstractmethod
    async def count(self, options: QueryOptions) -> int:
        """Count active invoices matching the filters, ignoring pagination."""
        pass

    @abstractmethod
    async def list(self, options: QueryOptions) -> list[Invoice]:
        """Return one page of active invoices, filtered and sorted."""
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: int) -> Invoice:
        """Fetch an active invoice. Raises InvoiceNotFoundError if absent."""
        pass

    @abstractmethod
    async def insert(self, invoice: Invoice) -> int:
        """Store a new invoice and return its id."""
        pass

    @abstractmethod
    async def soft_delete(self, invoice_id: int) -> int:
        """Deactivate an active invoice. Returns the number of rows affected."""
        pass

    @abstractmethod
    async def update_description(self, invoice_id: int, description: str) -> int:
        """Replace the description of an active invoice. Returns rows matched."""
        pass


_COLUMNS = {
    InvoiceField.DOCUMENT: InvoiceRecord.document,
    InvoiceField.REFERENCE_MONTH: InvoiceRecord.reference_month,
    InvoiceField.REFERENCE_YEAR: InvoiceRecord.reference_year,
}


def apply_filters(stmt: Select, options: QueryOptions) -> Select:
    """Restrict ``stmt`` to active rows matching every filter."""
    stmt = stmt.where(InvoiceRecord.is_active.is_(True))
    for field, value in options.filters.items():
        column = _COLUMNS[field]
        if field is InvoiceField.DOCUMENT:
            stmt = stmt.where(column == value)
            continue
        number = parse_int(value)
        # a non-numeric or out-of-range period can never match an integer column
        if number is None or not fits_integer_column(number):
            stmt = stmt.where(false())
        else:
            stmt = stmt.where(column == number)
    return stmt


def apply_sorts(stmt: Select, options: QueryOptions) -> Select:
    """Add ORDER BY clauses in priority order."""
    for sort in options.sorts:
        column = _COLUMNS[sort.field]
        stmt = stmt.order_by(column.desc() if sort.desc else column.asc())
    return stmt


class SQLAlchemyInvoiceRepository(InvoiceRepository):
    """Invoice repository backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.exception("Invoice repository operation failed")
            raise RepositoryError(f"Database error: {e}") from e
        finally:
            await session.close()

    async def count(self, options: QueryOptions) -> int:
        stmt = apply_filters(select(func.count()).select_from(InvoiceRecord), options)
        async with self._session() as session:
            return (await session.execute(stmt)).scalar_one()

    async def list(self, options: QueryOptions) -> list[Invoice]:
        stmt = apply_sorts(apply_filters(select(InvoiceRecord), options), options)
        stmt = stmt.offset(options.pagination.offset).limit(options.pagination.limit)
        async with self._session() as session:
            records = (await session.execute(stmt)).scalars().all()
        return [record.to_domain() for record in records]

    async def get_by_id(self, invoice_id: int) -> Invoice:
        if not fits_integer_column(invoice_id):
            raise InvoiceNotFoundError(invoice_id)
        stmt = select(InvoiceRecord).where(
            InvoiceRecord.id == invoice_id,
            InvoiceRecord.is_active.is_(True),
        )
        async with self._session() as session:
            record = (await session.execute(stmt)).scalar_one_or_none()
        if record is None:
            raise InvoiceNotFoundError(invoice_id)
        return record.to_domain()

    async def insert(self, invoice: Invoice) -> int:
        record = InvoiceRecord.from_domain(invoice)
        async with self._session() as session:
            session.add(record)
            await session.commit()
        logger.info(f"Invoice {record.id} created (document={invoice.document})")
        return record.id

    async def soft_delete(self, invoice_id: int) -> int:
        if not fits_integer_column(invoice_id):
            return 0
        stmt = (
            update(InvoiceRecord)
            .where(InvoiceRecord.id == invoice_id, InvoiceRecord.is_active.is_(True))
            .values(is_active=False, deactivated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        async with self._session() as session:
            rows = (await session.execute(stmt)).rowcount
            await session.commit()
        if rows:
            logger.info(f"Invoice {invoice_id} deactivated")
        return rows

    async def update_description(self, invoice_id: int, description: str) -> int:
        if not fits_integer_column(invoice_id):
            return 0
        stmt = (
            update(InvoiceRecord)
            .where(InvoiceRecord.id == invoice_id, InvoiceRecord.is_active.is_(True))
            .values(description=description)
            .execution_options(synchronize_session=False)
        )
        async with self._session() as session:
            rows = (await session.execute(stmt)).rowcount
            await session.commit()
        return rows
