"""
Page-bound checks and RFC 5988 navigation links for invoice listings.

Design Decisions:
- Links are relative to the serving host: ``<host>/invoices?<query>``
- The incoming query is re-encoded with keys sorted and ``page`` replaced,
  so every other filter, sort and token parameter survives navigation
- Link order is fixed: next, last, first, prev
"""

from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urlencode

from invoice_api.errors import PageOutOfRangeError

from .models import Pagination
from .query import group_params


@dataclass(frozen=True)
class NavigationLink:
    """A single ``<url>; rel="..."`` entry of a Link header."""
    rel: str
    url: str

    def __str__(self) -> str:
        return f'<{self.url}>; rel="{self.rel}"'


def check_page(pagination: Pagination, total: int) -> int:
    """
    Validate the requested page against the matching record count.

    Must only be called with ``total > 0``; an empty result set skips
    page validation entirely.

    Returns:
        The last page number.

    Raises:
        PageOutOfRangeError: If page < 1 or page > last page. A page size
            below 1 has last page 0, so every page is out of range.
    """
    last_page = pagination.last_page(total)
    if pagination.page < 1 or pagination.page > last_page:
        raise PageOutOfRangeError(pagination.page, last_page)
    return last_page


def page_url(base_url: str, query: dict[str, list[str]], page: int) -> str:
    """Return ``base_url`` followed by the query with ``page`` set."""
    values = dict(query)
    values["page"] = [str(page)]
    return base_url + urlencode(sorted(values.items()), doseq=True)


def build_navigation_links(
    host: str,
    query_items: Iterable[tuple[str, str]],
    page: int,
    last_page: int,
) -> list[NavigationLink]:
    """
    Build the navigation links that apply to ``page``.

    Emits next and last when a later page exists, then first and prev
    when an earlier page exists.
    """
    base_url = f"{host}/invoices?"
    query = group_params(query_items)
    links: list[NavigationLink] = []

    if page < last_page:
        links.append(NavigationLink("next", page_url(base_url, query, page + 1)))
        links.append(NavigationLink("last", page_url(base_url, query, last_page)))
    if page > 1:
        links.append(NavigationLink("first", page_url(base_url, query, 1)))
        links.append(NavigationLink("prev", page_url(base_url, query, page - 1)))

    return links


def format_link_header(links: list[NavigationLink]) -> str | None:
    """Join links into a Link header value, or None when there are none."""
    if not links:
        return None
    return ", ".join(str(link) for link in links)
