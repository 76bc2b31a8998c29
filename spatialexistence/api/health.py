"""
Health check endpoints.

Provides liveness and readiness probes. Readiness checks the event ledger
database and reports whether the collection engine is loaded.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from spatialexistence.db.database import get_session
from spatialexistence.services.lifecycle import TokenLifecycleEngine, get_engine

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    minted: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not check dependencies."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the event ledger database is unavailable.
    """
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")

    return HealthResponse(status="ready", database="connected", minted=engine.minted_count)
