"""
Validation rules for listing query parameters and invoice input.

Pure functions, no I/O. Listing validation inspects the raw parameter
mapping exactly as received on the wire (name -> list of values) and
reports every violation it finds instead of stopping at the first one.

Design Decisions:
- Errors accumulate in a list; an empty list means the request may proceed
- At most one message per parameter and rule, even if several values break it
- Integer parsing is strict (ASCII digits, optional sign, 64-bit range) so
  that "1_000", " 1" or "١" are rejected the same way everywhere
"""

import math
import re
from collections.abc import Mapping, Sequence

from .models import DOCUMENT_MAX_LENGTH, InvoiceField


FILTER_PARAMS = InvoiceField.names()
INTEGER_PARAMS = ("referenceMonth", "referenceYear", "page", "perPage")
ALLOWED_PARAMS = frozenset((*FILTER_PARAMS, "sort", "apiToken", "page", "perPage"))

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

DOCUMENT_LENGTH_MESSAGE = (
    f"parameter document cannot have length greater than {DOCUMENT_MAX_LENGTH} characters"
)
EMPTY_SORT_FIELD_MESSAGE = "malformed sort query"
INVALID_SORT_FIELD_MESSAGE = (
    "malformed sort query. Correct syntax: "
    "sort=[-](document|referenceMonth|referenceYear)[,...]"
)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_int(value: str) -> int | None:
    """
    Parse a base-10 integer strictly.

    Returns None when ``value`` is not an optionally signed run of ASCII
    digits or does not fit in a signed 64-bit integer.
    """
    if not _INTEGER_RE.fullmatch(value):
        return None
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number


def parse_amount(value: str | None) -> float | None:
    """Parse a finite monetary amount, or return None."""
    if value is None:
        return None
    try:
        amount = float(value)
    except ValueError:
        return None
    if "_" in value or value != value.strip() or not math.isfinite(amount):
        return None
    return amount


def document_too_long(document: str) -> bool:
    # len() counts code points, not bytes
    return len(document) > DOCUMENT_MAX_LENGTH


def validate_sort_expression(expression: str) -> list[str]:
    """
    Validate a comma-separated sort expression such as ``-referenceYear,document``.
    """
    errors: list[str] = []
    for segment in expression.split(","):
        if segment == "":
            errors.append(EMPTY_SORT_FIELD_MESSAGE)
            continue
        name = segment[1:] if segment.startswith("-") else segment
        if name not in FILTER_PARAMS:
            errors.append(INVALID_SORT_FIELD_MESSAGE)
    return errors


def validate_query_params(params: Mapping[str, Sequence[str]]) -> list[str]:
    """
    Validate the raw query parameters of a listing request.

    Rules, applied independently to every key present:
    - unknown key -> "invalid parameter <key>"
    - known key given more than once -> "duplicate parameter <key>"
    - document longer than 14 code points -> length error
    - referenceMonth/referenceYear/page/perPage not an integer
      -> "parameter <key> must be an integer"
    - sort with an empty segment or an unknown field -> malformed sort error

    Returns:
        All violations found, in parameter order. Empty when valid.
    """
    errors: list[str] = []

    for key, values in params.items():
        if key not in ALLOWED_PARAMS:
            errors.append(f"invalid parameter {key}")
            continue
        if len(values) > 1:
            errors.append(f"duplicate parameter {key}")

        if key == "document":
            if any(document_too_long(value) for value in values):
                errors.append(DOCUMENT_LENGTH_MESSAGE)

        elif key in INTEGER_PARAMS:
            if any(parse_int(value) is None for value in values):
                errors.append(f"parameter {key} must be an integer")

        elif key == "sort":
            for value in values:
                errors.extend(validate_sort_expression(value))

    return errors
