"""
Token API endpoints.

Provides minting, claiming and transfers, plus per-token lookups.
Every successful mutation is committed to the event ledger in the same
request; if that write fails the mutation is undone.
"""

from functools import partial
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from spatialexistence.db import apply_and_record
from spatialexistence.db.database import get_session
from spatialexistence.services.lifecycle import TokenLifecycleEngine, get_engine

router = APIRouter(prefix="/tokens", tags=["tokens"])

TokenId = Annotated[int, Path(ge=1)]


class PaymentRequest(BaseModel):
    """Request model for paid operations (mint, claim)."""

    caller: str = Field(..., min_length=1, description="Address of the caller")
    value: int = Field(..., ge=0, description="Amount paid in wei")


class TransferRequest(BaseModel):
    """Request model for a token transfer."""

    caller: str = Field(..., min_length=1, description="Current owner address")
    recipient: str = Field(..., min_length=1, description="Receiving address")


class MintResponse(BaseModel):
    token_id: int
    owner: str
    token_uri: str


class TokenResponse(BaseModel):
    """Response model for a single token."""

    token_id: int
    owner: str
    claimed: bool
    token_uri: str


class TokenUriResponse(BaseModel):
    token_id: int
    token_uri: str


@router.post("/mint", response_model=MintResponse, status_code=status.HTTP_201_CREATED)
async def mint_token(
    request: PaymentRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> MintResponse:
    """
    Mint the next token to the caller.

    Rejections (insufficient payment, second mint, exhausted supply) are
    returned as classified failures.
    """
    token_id, _ = await apply_and_record(
        session, engine, partial(engine.mint, request.caller, request.value)
    )

    return MintResponse(
        token_id=token_id,
        owner=request.caller,
        token_uri=engine.token_uri(token_id),
    )


@router.get("/{token_id}", response_model=TokenResponse)
async def get_token(
    token_id: TokenId,
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> TokenResponse:
    """Get owner, claim status and current metadata locator of a token."""
    token = engine.get_token(token_id)
    return TokenResponse(
        token_id=token.token_id,
        owner=token.owner,
        claimed=token.claimed,
        token_uri=engine.token_uri(token_id),
    )


@router.get("/{token_id}/uri", response_model=TokenUriResponse)
async def get_token_uri(
    token_id: TokenId,
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> TokenUriResponse:
    """Get the metadata locator for the active phase."""
    return TokenUriResponse(token_id=token_id, token_uri=engine.token_uri(token_id))


@router.post("/{token_id}/claim", response_model=TokenResponse)
async def claim_token(
    token_id: TokenId,
    request: PaymentRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> TokenResponse:
    """Claim a token owned by the caller. Each token can be claimed once."""
    await apply_and_record(
        session, engine, partial(engine.claim, request.caller, token_id, request.value)
    )

    return TokenResponse(
        token_id=token_id,
        owner=request.caller,
        claimed=True,
        token_uri=engine.token_uri(token_id),
    )


@router.post("/{token_id}/transfer", response_model=TokenResponse)
async def transfer_token(
    token_id: TokenId,
    request: TransferRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    engine: Annotated[TokenLifecycleEngine, Depends(get_engine)],
) -> TokenResponse:
    """Transfer a token to another address."""
    await apply_and_record(
        session, engine, partial(engine.transfer, request.caller, request.recipient, token_id)
    )

    token = engine.get_token(token_id)
    return TokenResponse(
        token_id=token.token_id,
        owner=token.owner,
        claimed=token.claimed,
        token_uri=engine.token_uri(token_id),
    )
