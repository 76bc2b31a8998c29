"""
Owner-only API endpoints.

Price updates and withdrawal. The caller address is checked against the
collection owner by the engine; any other caller gets 403.
"""

from functools import partial
from typing import Annotated, cast

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from spatialexistence.db import apply_and_record
from spatialexistence.db.database import get_session
from spatialexistence.models.events import ClaimPriceUpdated, MintPriceUpdated
from spatialexistence.services.lifecycle import TokenLifecycleEngine, get_engine

router = APIRouter(prefix="/admin", tags=["admin"])


class PriceUpdateRequest(BaseModel):
    caller: str = Field(..., min_length=1)
    price: int = Field(..., ge=0, description="New price in wei")


class PriceUpdateResponse(BaseModel):
    old_price: int
    new_price: int


class WithdrawRequest(BaseModel):
    caller: str = Field(..., min_length=1)


class WithdrawResponse(BaseModel):
    recipient: str
    amount: int


@router.put("/mint-price", response_model=PriceUpdateResponse)
async def update_mint_price(
    request: PriceUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> PriceUpdateResponse:
    """Replace the mint price. Already completed mints are unaffected."""
    _, events = await apply_and_record(
        session, engine, partial(engine.set_mint_price, request.caller, request.price)
    )

    updated = cast(MintPriceUpdated, events[-1])
    return PriceUpdateResponse(old_price=updated.old_price, new_price=updated.new_price)


@router.put("/claim-price", response_model=PriceUpdateResponse)
async def update_claim_price(
    request: PriceUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> PriceUpdateResponse:
    """Replace the claim price. Already completed claims are unaffected."""
    _, events = await apply_and_record(
        session, engine, partial(engine.set_claim_price, request.caller, request.price)
    )

    updated = cast(ClaimPriceUpdated, events[-1])
    return PriceUpdateResponse(old_price=updated.old_price, new_price=updated.new_price)


@router.post("/withdraw", response_model=WithdrawResponse)
async def withdraw(
    request: WithdrawRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> WithdrawResponse:
    """Pay the full balance out to the owner."""
    amount, _ = await apply_and_record(session, engine, partial(engine.withdraw, request.caller))

    return WithdrawResponse(recipient=engine.owner, amount=amount)
