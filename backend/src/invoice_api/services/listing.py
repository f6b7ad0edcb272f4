"""
Invoice listing orchestrator.

Coordinates one listing request end to end:
1. Validate the raw query parameters
2. Build QueryOptions
3. Count matching invoices (empty result short-circuits here)
4. Check the requested page against the last page
5. Fetch the page and render navigation links

The service holds no per-request state; one instance can serve
concurrent requests.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from invoice_api.domain.models import DEFAULT_PER_PAGE, Invoice
from invoice_api.domain.pagination import (
    NavigationLink,
    build_navigation_links,
    check_page,
    format_link_header,
)
from invoice_api.domain.query import build_query_options, group_params
from invoice_api.domain.validation import validate_query_params
from invoice_api.errors import PageOutOfRangeError, QueryValidationError
from invoice_api.infrastructure.repository import InvoiceRepository

logger = logging.getLogger(__name__)


@dataclass
class InvoicePage:
    """Result of a successful listing request."""
    items: list[Invoice]
    total_count: int
    links: list[NavigationLink] = field(default_factory=list)

    @property
    def link_header(self) -> str | None:
        return format_link_header(self.links)

    @property
    def headers(self) -> dict[str, str]:
        """Response headers: X-Total-Count always, Link when any link applies."""
        headers = {"X-Total-Count": str(self.total_count)}
        link_header = self.link_header
        if link_header is not None:
            headers["Link"] = link_header
        return headers


class InvoiceListingService:
    """Turns raw listing parameters into a bounded page of invoices."""

    def __init__(
        self,
        repository: InvoiceRepository,
        default_per_page: int = DEFAULT_PER_PAGE,
    ) -> None:
        self.repository = repository
        self.default_per_page = default_per_page

    async def list_invoices(
        self,
        query_items: Sequence[tuple[str, str]],
        host: str,
    ) -> InvoicePage:
        """
        Run the listing pipeline.

        Args:
            query_items: Query parameters as received, one pair per occurrence
            host: Host prefix for navigation links

        Raises:
            QueryValidationError: If any parameter is rejected (all reasons listed)
            PageOutOfRangeError: If results exist but the page is outside [1, last page]
            RepositoryError: If counting or listing fails
        """
        params = group_params(query_items)

        errors = validate_query_params(params)
        if errors:
            logger.info(f"Rejected listing query: {errors}")
            raise QueryValidationError(errors)

        options = build_query_options(params, default_per_page=self.default_per_page)

        total = await self.repository.count(options)
        if total == 0:
            return InvoicePage(items=[], total_count=0)

        try:
            last_page = check_page(options.pagination, total)
        except PageOutOfRangeError as e:
            logger.info(f"Page {e.page} out of range (last page {e.last_page})")
            raise

        items = await self.repository.list(options)
        links = build_navigation_links(host, query_items, options.pagination.page, last_page)

        logger.debug(
            f"Listed {len(items)} of {total} invoices "
            f"(page {options.pagination.page}/{last_page})"
        )
        return InvoicePage(items=items, total_count=total, links=links)
