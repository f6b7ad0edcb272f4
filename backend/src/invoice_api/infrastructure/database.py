"""
Database configuration and session management with SQLAlchemy.

Uses async SQLAlchemy for non-blocking database operations.

Design Decisions:
- AsyncSession for non-blocking operations
- Connection pooling with sensible defaults
- Engine and session factory are created explicitly and handed to the
  repository; there is no module-level connection state
- Session-per-operation pattern
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from invoice_api.config import Settings
from invoice_api.domain.models import DOCUMENT_MAX_LENGTH, Invoice

logger = logging.getLogger(__name__)

# Range of the 4-byte Integer columns (id, reference_month, reference_year)
INTEGER_MIN = -(2**31)
INTEGER_MAX = 2**31 - 1


def fits_integer_column(value: int) -> bool:
    return INTEGER_MIN <= value <= INTEGER_MAX


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class InvoiceRecord(Base):
    """
    Persistent invoice row.

    Rows are never physically deleted: soft delete clears ``is_active``
    and stamps ``deactivated_at``.
    """
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    # Accounting period
    reference_month: Mapped[int] = mapped_column(Integer, index=True)
    reference_year: Mapped[int] = mapped_column(Integer, index=True)

    document: Mapped[str] = mapped_column(String(DOCUMENT_MAX_LENGTH), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    amount: Mapped[float] = mapped_column(Float)

    # Soft delete
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    deactivated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def to_domain(self) -> Invoice:
        return Invoice(
            id=self.id,
            created_at=self.created_at,
            reference_month=self.reference_month,
            reference_year=self.reference_year,
            document=self.document,
            description=self.description or "",
            amount=self.amount,
            is_active=self.is_active,
            deactivated_at=self.deactivated_at,
        )

    @classmethod
    def from_domain(cls, invoice: Invoice) -> "InvoiceRecord":
        return cls(
            created_at=invoice.created_at,
            reference_month=invoice.reference_month,
            reference_year=invoice.reference_year,
            document=invoice.document,
            description=invoice.description,
            amount=invoice.amount,
            is_active=invoice.is_active,
            deactivated_at=invoice.deactivated_at,
        )


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async database engine."""
    engine = create_async_engine(
        str(settings.database_url),
        echo=settings.debug,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
    )
    url = make_url(str(settings.database_url))
    logger.info(f"Database engine created for {url.host or 'unknown'}")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Get the session factory for creating database sessions."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize database tables.

    Call this on application startup to ensure tables exist.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialized")


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections on shutdown."""
    await engine.dispose()
    logger.info("Database connections closed")
