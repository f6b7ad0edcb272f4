"""
Invoice API - REST service for invoice records.

Exposes CRUD operations on invoices with filtering, sorting
and paginated listing.
"""

__version__ = "0.4.0"
