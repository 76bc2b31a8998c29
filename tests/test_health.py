"""Smoke test for application startup."""

from unittest.mock import AsyncMock, patch

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from spatialexistence.db.operations import record_events
from spatialexistence.models.db import Base
from spatialexistence.models.events import TokenMinted
from spatialexistence.services.lifecycle import get_engine


def test_app_imports() -> None:
    """Verify the app can be imported without errors."""
    from spatialexistence.main import app

    assert app.title == "SpatialExistence"


def test_all_routers_mounted() -> None:
    from spatialexistence.main import app

    paths = {route.path for route in app.routes}

    assert {"/tokens/mint", "/collection", "/admin/withdraw", "/events", "/ready"} <= paths


async def test_startup_restores_engine_from_ledger() -> None:
    from spatialexistence.config import settings
    from spatialexistence.main import app, lifespan

    db_engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        await record_events(
            session, [TokenMinted(minter="0xalice", token_id=1, paid=settings.mint_price_wei)]
        )
        await session.commit()

    with (
        patch("spatialexistence.main.init_db", new_callable=AsyncMock) as mock_init,
        patch("spatialexistence.main.async_session_factory", session_factory),
    ):
        async with lifespan(app):
            engine = get_engine()

    mock_init.assert_awaited_once()
    assert engine.owner_of(1) == "0xalice"
    assert engine.minted_count == 1

    await db_engine.dispose()
