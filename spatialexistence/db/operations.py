"""
Database operations for the token event ledger and the deployment record.

Events are append-only: there are no update or delete operations.
"""

import logging
from collections.abc import Callable, Sequence
from typing import TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from spatialexistence.config import settings
from spatialexistence.models.db import CollectionDeploymentDB, TokenEventDB
from spatialexistence.models.events import (
    ClaimPriceUpdated,
    MintPriceUpdated,
    TokenClaimed,
    TokenEvent,
    TokenMinted,
    TokenTransferred,
    Withdraw,
)
from spatialexistence.services.lifecycle import TokenLifecycleEngine, capture_events

logger = logging.getLogger(__name__)

T = TypeVar("T")


def event_to_record(event: TokenEvent) -> TokenEventDB:
    """Flatten an engine event into a ledger row."""
    record = TokenEventDB(kind=event.kind)

    if isinstance(event, TokenMinted):
        record.account = event.minter
        record.token_id = event.token_id
        record.amount = str(event.paid)
    elif isinstance(event, TokenClaimed):
        record.account = event.claimer
        record.token_id = event.token_id
        record.amount = str(event.paid)
    elif isinstance(event, TokenTransferred):
        record.account = event.sender
        record.counterparty = event.recipient
        record.token_id = event.token_id
    elif isinstance(event, (MintPriceUpdated, ClaimPriceUpdated)):
        record.old_value = str(event.old_price)
        record.new_value = str(event.new_price)
    elif isinstance(event, Withdraw):
        record.account = event.recipient
        record.amount = str(event.amount)

    return record


def record_to_event(record: TokenEventDB) -> TokenEvent:
    """
    Rebuild the engine event a ledger row was written from.

    Raises:
        ValueError: If the row kind is unknown
    """
    kind = record.kind
    if kind == TokenMinted.kind:
        return TokenMinted(
            minter=record.account, token_id=record.token_id, paid=int(record.amount or 0)
        )
    if kind == TokenClaimed.kind:
        return TokenClaimed(
            claimer=record.account, token_id=record.token_id, paid=int(record.amount or 0)
        )
    if kind == TokenTransferred.kind:
        return TokenTransferred(
            sender=record.account, recipient=record.counterparty, token_id=record.token_id
        )
    if kind == MintPriceUpdated.kind:
        return MintPriceUpdated(old_price=int(record.old_value), new_price=int(record.new_value))
    if kind == ClaimPriceUpdated.kind:
        return ClaimPriceUpdated(old_price=int(record.old_value), new_price=int(record.new_value))
    if kind == Withdraw.kind:
        return Withdraw(recipient=record.account, amount=int(record.amount))
    raise ValueError(f"Unknown ledger event kind: {kind}")


async def record_events(
    session: AsyncSession, events: Sequence[TokenEvent]
) -> list[TokenEventDB]:
    """
    Append events to the ledger in emission order.

    Flushes so the rows receive ids; the caller owns the commit.
    """
    records = [event_to_record(event) for event in events]
    session.add_all(records)
    await session.flush()
    return records


async def list_events(
    session: AsyncSession,
    token_id: int | None = None,
    limit: int = 100,
) -> list[TokenEventDB]:
    """
    Get ledger entries, oldest first.

    If token_id is given, only events about that token are returned.
    """
    query = select(TokenEventDB).order_by(TokenEventDB.id).limit(limit)
    if token_id is not None:
        query = query.where(TokenEventDB.token_id == token_id)

    result = await session.execute(query)
    return list(result.scalars().all())


async def list_events_after(session: AsyncSession, after_id: int) -> list[TokenEventDB]:
    """Get every ledger entry with an id above after_id, oldest first."""
    result = await session.execute(
        select(TokenEventDB).where(TokenEventDB.id > after_id).order_by(TokenEventDB.id)
    )
    return list(result.scalars().all())


async def apply_and_record(
    session: AsyncSession,
    engine: TokenLifecycleEngine,
    operation: Callable[[], T],
) -> tuple[T, list[TokenEvent]]:
    """
    Run an engine mutation and commit its events as one unit.

    Writers are serialized on the engine's write lock. If the ledger write
    or the commit fails, the engine is restored to its state before the
    mutation and the database error propagates. Rejected operations raise
    before anything is written.

    Returns:
        The operation's result and the events it emitted
    """
    async with engine.write_lock:
        checkpoint = engine.checkpoint()
        with capture_events(engine) as events:
            result = operation()

        try:
            await record_events(session, events)
            await session.commit()
        except SQLAlchemyError:
            engine.restore(checkpoint)
            logger.error(
                "LEDGER_WRITE_FAILED",
                extra={"events": [event.kind for event in events]},
            )
            raise

    return result, events


async def save_deployment(
    session: AsyncSession, engine: TokenLifecycleEngine
) -> CollectionDeploymentDB:
    """
    Store the parameters of a freshly deployed engine.

    Events already in the ledger belong to earlier deployments and are
    excluded through ledger_offset. The caller owns the commit.
    """
    offset = await session.scalar(select(func.max(TokenEventDB.id)))
    deployment = CollectionDeploymentDB(
        base_uri=engine.base_uri,
        owner=engine.owner,
        mint_price=str(engine.mint_price),
        claim_price=str(engine.claim_price),
        phase_duration=engine.phase_duration,
        deployed_at=engine.deployed_at,
        ledger_offset=offset or 0,
    )
    session.add(deployment)
    await session.flush()
    return deployment


async def get_latest_deployment(session: AsyncSession) -> CollectionDeploymentDB | None:
    """Get the live deployment, or None if the collection was never deployed."""
    result = await session.execute(
        select(CollectionDeploymentDB).order_by(CollectionDeploymentDB.id.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def load_engine(
    session: AsyncSession, clock: Callable[[], float] | None = None
) -> TokenLifecycleEngine:
    """
    Rebuild the engine from the latest deployment and its ledger events.

    Without a deployment the engine is created from settings and replays
    the whole ledger.
    """
    deployment = await get_latest_deployment(session)
    clock_kwargs = {} if clock is None else {"clock": clock}

    if deployment is None:
        engine = TokenLifecycleEngine(
            base_uri=settings.base_uri,
            owner=settings.owner_address,
            mint_price=settings.mint_price_wei,
            claim_price=settings.claim_price_wei,
            phase_duration=settings.phase_duration_seconds,
            **clock_kwargs,
        )
        offset = 0
    else:
        engine = TokenLifecycleEngine(
            base_uri=deployment.base_uri,
            owner=deployment.owner,
            mint_price=int(deployment.mint_price),
            claim_price=int(deployment.claim_price),
            phase_duration=deployment.phase_duration,
            deployed_at=deployment.deployed_at,
            **clock_kwargs,
        )
        offset = deployment.ledger_offset

    records = await list_events_after(session, offset)
    engine.replay(record_to_event(record) for record in records)
    return engine
