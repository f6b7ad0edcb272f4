"""
Error taxonomy for the invoice API.

Each error knows the HTTP status it maps to. The handlers registered in
``invoice_api.main`` turn them into JSON bodies of the form
``{"error": "..."}`` or, for query validation, ``{"errors": [...]}``.
"""

NOT_FOUND_MESSAGE = "there is no resource with the specified id"
INVALID_PAGE_MESSAGE = "Invalid page number passed as parameter."


class InvoiceApiError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict:
        return {"error": self.message}


class ClientValidationError(InvoiceApiError):
    """Malformed input supplied by the caller. Never retried."""

    status_code = 400


class QueryValidationError(ClientValidationError):
    """One or more listing query parameters were rejected."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)

    def to_body(self) -> dict:
        return {"errors": self.errors}


class PageOutOfRangeError(ClientValidationError):
    """Requested page lies outside [1, last page]."""

    def __init__(self, page: int, last_page: int) -> None:
        super().__init__(INVALID_PAGE_MESSAGE)
        self.page = page
        self.last_page = last_page


class NotFoundError(InvoiceApiError):
    status_code = 404

    def __init__(self, message: str = NOT_FOUND_MESSAGE) -> None:
        super().__init__(message)


class InvoiceNotFoundError(NotFoundError):
    """No active invoice exists with the given id."""

    def __init__(self, invoice_id: int) -> None:
        super().__init__()
        self.invoice_id = invoice_id


class AuthError(InvoiceApiError):
    status_code = 401


class RepositoryError(InvoiceApiError):
    """The underlying store failed. Propagated as a 500 without retry."""

    status_code = 500
