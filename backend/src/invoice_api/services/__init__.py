"""
Services package - Business logic on top of the repository.
"""

from .listing import InvoiceListingService, InvoicePage

__all__ = ["InvoiceListingService", "InvoicePage"]
