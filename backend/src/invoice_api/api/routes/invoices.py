"""
Invoice endpoints.

CRUD over invoices plus the filtered, sorted and paginated listing.
All routes require a valid apiToken.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.responses import RedirectResponse

from invoice_api.api.dependencies import (
    get_listing_service,
    get_public_host,
    get_repository,
    require_api_token,
)
from invoice_api.api.schemas import (
    ErrorListResponse,
    ErrorResponse,
    InvoiceItemResponse,
    InvoiceListResponse,
    InvoiceResponse,
)
from invoice_api.domain.models import Invoice
from invoice_api.domain.validation import (
    DOCUMENT_LENGTH_MESSAGE,
    document_too_long,
    parse_amount,
    parse_int,
)
from invoice_api.errors import ClientValidationError, InvoiceNotFoundError
from invoice_api.infrastructure.repository import InvoiceRepository
from invoice_api.services.listing import InvoiceListingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["invoices"], dependencies=[Depends(require_api_token)])

Repository = Annotated[InvoiceRepository, Depends(get_repository)]
PublicHost = Annotated[str, Depends(get_public_host)]


def parse_invoice_id(raw_id: str) -> int:
    invoice_id = parse_int(raw_id)
    if invoice_id is None:
        raise ClientValidationError("parameter id should be an integer")
    return invoice_id


@router.get("/", include_in_schema=False)
async def root(request: Request) -> RedirectResponse:
    """Redirect to the invoice listing, keeping the query string."""
    url = "/invoices"
    if request.url.query:
        url += f"?{request.url.query}"
    return RedirectResponse(url, status_code=status.HTTP_301_MOVED_PERMANENTLY)


@router.get(
    "/invoices",
    response_model=InvoiceListResponse,
    responses={
        400: {"model": ErrorListResponse, "description": "Invalid query parameters or page"},
        401: {"model": ErrorResponse},
    },
)
async def list_invoices(
    request: Request,
    response: Response,
    service: Annotated[InvoiceListingService, Depends(get_listing_service)],
    host: PublicHost,
) -> InvoiceListResponse:
    """
    List active invoices.

    **Query parameters:**
    - `document`, `referenceMonth`, `referenceYear`: exact-match filters
    - `sort`: comma-separated fields, `-` prefix for descending
      (e.g. `sort=-referenceYear,document`)
    - `page` (default 1), `perPage` (default 5)

    Sets `X-Total-Count` to the number of matching invoices and `Link`
    to the applicable first/prev/next/last pages.
    """
    page = await service.list_invoices(request.query_params.multi_items(), host)
    response.headers.update(page.headers)
    return InvoiceListResponse(
        items=[InvoiceResponse.from_domain(invoice) for invoice in page.items]
    )


@router.get(
    "/invoices/{invoice_id}",
    response_model=InvoiceItemResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Id is not an integer"},
        404: {"model": ErrorResponse, "description": "Invoice not found"},
    },
)
async def show_invoice(invoice_id: str, repository: Repository) -> InvoiceItemResponse:
    """Fetch a single active invoice."""
    invoice = await repository.get_by_id(parse_invoice_id(invoice_id))
    return InvoiceItemResponse(item=InvoiceResponse.from_domain(invoice))


@router.post(
    "/invoices",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={400: {"model": ErrorResponse, "description": "Invalid form fields"}},
)
async def create_invoice(
    repository: Repository,
    host: PublicHost,
    document: Annotated[str | None, Form()] = None,
    amount: Annotated[str | None, Form()] = None,
    description: Annotated[str, Form()] = "",
) -> Response:
    """
    Create an invoice for the current accounting period.

    Responds with the new resource URL in the `Location` header.
    """
    parsed_amount = parse_amount(amount)
    if parsed_amount is None:
        raise ClientValidationError("amount parameter must be specified and must be a number")
    if not document:
        raise ClientValidationError("missing or empty document parameter")
    if document_too_long(document):
        raise ClientValidationError(DOCUMENT_LENGTH_MESSAGE)

    now = datetime.now(timezone.utc)
    invoice_id = await repository.insert(
        Invoice(
            created_at=now,
            reference_month=now.month,
            reference_year=now.year,
            document=document,
            description=description,
            amount=parsed_amount,
        )
    )

    return Response(
        status_code=status.HTTP_201_CREATED,
        headers={"Location": f"{host}/invoices/{invoice_id}"},
    )


@router.put(
    "/invoices/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse, "description": "Invoice not found"},
    },
)
async def update_invoice(invoice_id: str, request: Request, repository: Repository) -> Response:
    """Replace the description of an active invoice."""
    parsed_id = parse_invoice_id(invoice_id)

    # An empty description is a valid value, so presence is checked on the raw form
    form = await request.form()
    description = form.get("description")
    if not isinstance(description, str):
        raise ClientValidationError("parameter description must be specified")

    rows = await repository.update_description(parsed_id, description)
    if rows == 0:
        raise InvoiceNotFoundError(parsed_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/invoices/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse, "description": "Invoice not found"},
    },
)
async def delete_invoice(invoice_id: str, repository: Repository) -> Response:
    """Soft-delete an active invoice."""
    parsed_id = parse_invoice_id(invoice_id)
    rows = await repository.soft_delete(parsed_id)
    if rows == 0:
        raise InvoiceNotFoundError(parsed_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
