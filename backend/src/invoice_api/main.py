"""
FastAPI application entry point.

This is the main application that ties together all components:
- API routes for invoices and health checks
- Database lifecycle management
- Error handling and logging
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from invoice_api import __version__
from invoice_api.api.routes import health, invoices
from invoice_api.config import Settings, get_settings
from invoice_api.errors import InvoiceApiError, RepositoryError
from invoice_api.infrastructure.database import (
    close_db,
    create_engine,
    create_session_factory,
    init_db,
)
from invoice_api.infrastructure.repository import InvoiceRepository, SQLAlchemyInvoiceRepository

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Opens the database and builds the repository unless one was injected
    through create_app, and disposes of the engine on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting Invoice API v{__version__}")
    logger.info(f"Debug mode: {settings.debug}")

    engine = None
    if app.state.repository is None:
        engine = create_engine(settings)
        await init_db(engine)
        app.state.repository = SQLAlchemyInvoiceRepository(create_session_factory(engine))
        logger.info("Database initialized")

    yield  # Application runs here

    logger.info("Shutting down Invoice API")
    if engine is not None:
        await close_db(engine)


def create_app(
    settings: Settings | None = None,
    repository: InvoiceRepository | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        repository: Invoice storage; a SQLAlchemy repository is created on
            startup when omitted

    Returns:
        Configured FastAPI instance ready to serve requests.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Invoice API",
        description=(
            "CRUD service for invoices.\n\n"
            "Listing supports exact-match filters, multi-field sorting and "
            "pagination with RFC 5988 Link headers."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.repository = repository

    # Register routers
    app.include_router(health.router)
    app.include_router(invoices.router)

    @app.exception_handler(RepositoryError)
    async def repository_error_handler(request: Request, exc: RepositoryError):
        """Storage failures abort the request with no partial body."""
        logger.error(f"Repository failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "Internal Server Error",
                "detail": exc.message if settings.debug else "An internal error occurred",
            },
        )

    @app.exception_handler(InvoiceApiError)
    async def api_error_handler(request: Request, exc: InvoiceApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all exception handler for unhandled errors."""
        logger.exception(f"Unhandled error: {exc}")

        # Don't expose internal errors in production
        if settings.debug:
            detail = str(exc)
        else:
            detail = "An internal error occurred"

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": detail,
            },
        )

    return app


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "invoice_api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=3000,
        reload=True,
    )
