"""
Collection API endpoints.

Read-only view of the collection: supply, prices, balance, active phase
and per-address mint records.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from spatialexistence.services.lifecycle import TokenLifecycleEngine, get_engine

router = APIRouter(prefix="/collection", tags=["collection"])


class PhaseResponse(BaseModel):
    """Currently active artwork phase."""

    phase: int
    suffix: str
    name: str


class CollectionResponse(BaseModel):
    """Response model for the collection summary."""

    base_uri: str
    owner: str
    total_supply: int
    minted: int
    mint_price: int
    claim_price: int
    balance: int
    deployed_at: float
    phase: PhaseResponse


class MinterResponse(BaseModel):
    address: str
    has_minted: bool


def _phase_response(engine: TokenLifecycleEngine) -> PhaseResponse:
    info = engine.phase_info()
    return PhaseResponse(phase=info.index, suffix=info.suffix, name=info.name)


@router.get("", response_model=CollectionResponse)
async def get_collection(
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> CollectionResponse:
    """Get the collection summary."""
    return CollectionResponse(
        base_uri=engine.base_uri,
        owner=engine.owner,
        total_supply=engine.total_supply,
        minted=engine.minted_count,
        mint_price=engine.mint_price,
        claim_price=engine.claim_price,
        balance=engine.balance,
        deployed_at=engine.deployed_at,
        phase=_phase_response(engine),
    )


@router.get("/phase", response_model=PhaseResponse)
async def get_current_phase(
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> PhaseResponse:
    """
    Get the active phase.

    Derived from elapsed time on every request; may change between two
    requests without any mint or claim in between.
    """
    return _phase_response(engine)


@router.get("/minters/{address}", response_model=MinterResponse)
async def get_minter(
    address: str,
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> MinterResponse:
    """Check whether an address has used its mint."""
    return MinterResponse(address=address, has_minted=engine.has_minted(address))
