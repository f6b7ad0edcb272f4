"""
Builds QueryOptions from raw listing parameters.

Runs after ``validate_query_params`` has accepted the request, so malformed
values are skipped here rather than reported again.
"""

from collections.abc import Iterable, Mapping, Sequence

from .models import DEFAULT_PER_PAGE, InvoiceField, Pagination, QueryOptions, Sort
from .validation import parse_int


def group_params(items: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
    """Collect (name, value) pairs into name -> values, keeping first-seen order."""
    grouped: dict[str, list[str]] = {}
    for key, value in items:
        grouped.setdefault(key, []).append(value)
    return grouped


def parse_sorts(expression: str) -> list[Sort]:
    """
    Parse ``-referenceYear,document`` into ordered Sort directives.

    A leading ``-`` marks a descending sort. Order is kept: the first
    field is the primary sort key.
    """
    sorts: list[Sort] = []
    for segment in expression.split(","):
        desc = segment.startswith("-")
        name = segment[1:] if desc else segment
        try:
            sorts.append(Sort(field=InvoiceField(name), desc=desc))
        except ValueError:
            continue
    return sorts


def build_query_options(
    params: Mapping[str, Sequence[str]],
    default_per_page: int = DEFAULT_PER_PAGE,
) -> QueryOptions:
    """
    Convert validated raw parameters into QueryOptions.

    Only parameters with exactly one value are applied. Unknown
    parameters are ignored.
    """
    options = QueryOptions(pagination=Pagination(per_page=default_per_page))
    page = options.pagination.page
    per_page = options.pagination.per_page

    for key, values in params.items():
        if len(values) != 1:
            continue
        value = values[0]

        if key in InvoiceField.names():
            options.filters[InvoiceField(key)] = value
        elif key == "page":
            number = parse_int(value)
            if number is not None:
                page = number
        elif key == "perPage":
            number = parse_int(value)
            if number is not None:
                per_page = number
        elif key == "sort":
            options.sorts = parse_sorts(value)

    options.pagination = Pagination(page=page, per_page=per_page)
    return options
