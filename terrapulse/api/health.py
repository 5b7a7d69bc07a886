"""
Health check endpoints.

Provides liveness and readiness probes with database connectivity checks.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from terrapulse.api.dependencies import get_marketplace
from terrapulse.db.database import get_session
from terrapulse.services.marketplace import Marketplace

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    listings_coherent: bool | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    marketplace: Annotated[Marketplace, Depends(get_marketplace)],
) -> HealthResponse:
    """
    Readiness probe.

    Checks database connectivity and that listings agree with NFT prices.
    Returns 503 if the database is unavailable.
    """
    coherent = not marketplace.store.check_listing_coherence()
    try:
        await session.execute(text("SELECT 1"))
        return HealthResponse(status="ready", database="connected", listings_coherent=coherent)
    except (SQLAlchemyError, OSError):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not ready", database="disconnected", listings_coherent=coherent
        )
