"""
SQLAlchemy ORM models for persistent storage.

The collection state lives in the engine; the database keeps the deployment
parameters and an append-only ledger of the events the engine emitted, from
which the engine is rebuilt at startup.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class TokenEventDB(Base):
    """
    A single collection event.

    Columns are a superset of all event shapes; unused ones stay NULL.
    Wei amounts exceed 64-bit integers, so they are stored as decimal strings.
    """

    __tablename__ = "token_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(50), index=True)
    token_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    # Acting account and, for transfers, the receiving one
    account: Mapped[str | None] = mapped_column(String(255), nullable=True)
    counterparty: Mapped[str | None] = mapped_column(String(255), nullable=True)

    amount: Mapped[str | None] = mapped_column(String(80), nullable=True)
    old_value: Mapped[str | None] = mapped_column(String(80), nullable=True)
    new_value: Mapped[str | None] = mapped_column(String(80), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<TokenEventDB(kind={self.kind}, token_id={self.token_id})>"


class CollectionDeploymentDB(Base):
    """
    Parameters a collection was deployed with.

    The newest row is the live deployment. Ledger events with an id above
    ledger_offset belong to it.
    """

    __tablename__ = "collection_deployments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    base_uri: Mapped[str] = mapped_column(String(512))
    owner: Mapped[str] = mapped_column(String(255))
    mint_price: Mapped[str] = mapped_column(String(80))
    claim_price: Mapped[str] = mapped_column(String(80))
    phase_duration: Mapped[int] = mapped_column(Integer)
    deployed_at: Mapped[float] = mapped_column(Float)
    ledger_offset: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<CollectionDeploymentDB(base_uri={self.base_uri}, owner={self.owner})>"
