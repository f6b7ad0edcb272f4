"""
Health check endpoint.

Provides liveness status for monitoring and load balancers. Not
authenticated.
"""

from fastapi import APIRouter

from invoice_api import __version__
from invoice_api.api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check that the service is up."""
    return HealthResponse(status="healthy", version=__version__)
