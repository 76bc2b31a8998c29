"""
Event ledger endpoints.

Lists the events recorded for successful collection mutations.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from spatialexistence.db import list_events
from spatialexistence.db.database import get_session
from spatialexistence.models.db import TokenEventDB

router = APIRouter(prefix="/events", tags=["events"])


class EventResponse(BaseModel):
    """A single ledger entry. Wei values are integers."""

    id: int
    kind: str
    token_id: int | None = None
    account: str | None = None
    counterparty: str | None = None
    amount: int | None = None
    old_value: int | None = None
    new_value: int | None = None
    created_at: datetime | None = None


class EventListResponse(BaseModel):
    events: list[EventResponse]
    count: int


def _to_int(value: str | None) -> int | None:
    return int(value) if value is not None else None


def _event_response(record: TokenEventDB) -> EventResponse:
    return EventResponse(
        id=record.id,
        kind=record.kind,
        token_id=record.token_id,
        account=record.account,
        counterparty=record.counterparty,
        amount=_to_int(record.amount),
        old_value=_to_int(record.old_value),
        new_value=_to_int(record.new_value),
        created_at=record.created_at,
    )


@router.get("", response_model=EventListResponse)
async def get_events(
    session: Annotated[AsyncSession, Depends(get_session)],
    token_id: Annotated[int | None, Query(ge=1)] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> EventListResponse:
    """
    Get recorded events, oldest first.

    Optionally restricted to a single token.
    """
    records = await list_events(session, token_id=token_id, limit=limit)
    events = [_event_response(r) for r in records]
    return EventListResponse(events=events, count=len(events))
