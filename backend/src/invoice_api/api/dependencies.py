"""
FastAPI dependencies shared by the invoice routes.

The repository and settings live on ``app.state`` and are set by
``create_app``; routes receive them through these providers.
"""

import logging
import secrets
from typing import Annotated

from fastapi import Depends, Request

from invoice_api.config import Settings
from invoice_api.errors import AuthError
from invoice_api.infrastructure.repository import InvoiceRepository
from invoice_api.services.listing import InvoiceListingService

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> InvoiceRepository:
    return request.app.state.repository


def get_listing_service(
    repository: Annotated[InvoiceRepository, Depends(get_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> InvoiceListingService:
    return InvoiceListingService(repository, default_per_page=settings.default_per_page)


def get_public_host(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> str:
    """Host prefix for Location and Link headers."""
    if settings.public_host:
        return settings.public_host
    return request.headers.get("host") or request.url.netloc


async def require_api_token(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> None:
    """
    Check the apiToken query parameter or form field.

    Raises:
        AuthError: If the token is missing or does not match.
    """
    token = request.query_params.get("apiToken")
    content_type = request.headers.get("content-type", "")
    if not token and content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        value = form.get("apiToken")
        token = value if isinstance(value, str) else None

    if not token:
        raise AuthError("API token required")
    if not secrets.compare_digest(token.encode(), settings.api_token.encode()):
        logger.warning(f"Invalid API token from {request.client.host if request.client else 'unknown'}")
        raise AuthError("Invalid API token")
