"""Tests for CLI jobs."""

from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from spatialexistence.db.operations import get_latest_deployment, list_events, load_engine
from spatialexistence.jobs.convert_images import run_convert
from spatialexistence.jobs.deploy import build_base_uri, run_deploy
from spatialexistence.jobs.generate_metadata import run_generate
from spatialexistence.models.db import Base
from spatialexistence.models.failure import AssetPipelineError
from spatialexistence.services.lifecycle import get_engine, reset_engine

DEPLOYER = "0xdeployer"


@pytest.fixture
async def session_factory():
    """Session factory bound to an in-memory SQLite ledger."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


class TestBuildBaseUri:
    @pytest.mark.parametrize("cid", ["bafyabc", "bafyabc/", " bafyabc ", "/bafyabc/"])
    def test_normalizes_slashes(self, cid: str) -> None:
        assert build_base_uri(cid) == "ipfs://bafyabc/"


class TestDeploy:
    async def test_deploy_mints_first_token(self, session_factory, clock) -> None:
        with patch("spatialexistence.jobs.deploy.async_session_factory", session_factory):
            deployment = await run_deploy("bafyabc", DEPLOYER, clock=clock)

        assert deployment.base_uri == "ipfs://bafyabc/"
        assert deployment.minted_token_id == 1
        assert deployment.engine.owner == DEPLOYER
        assert deployment.engine.token_uri(1) == "ipfs://bafyabc/1a.json"
        assert deployment.engine.balance == deployment.engine.mint_price

        async with session_factory() as session:
            records = await list_events(session)
            stored = await get_latest_deployment(session)

        assert [(r.kind, r.account, r.token_id) for r in records] == [
            ("TokenMinted", DEPLOYER, 1)
        ]
        assert stored.base_uri == "ipfs://bafyabc/"
        assert stored.owner == DEPLOYER
        assert stored.deployed_at == clock.now

    async def test_deployed_engine_is_served(self, session_factory, clock) -> None:
        with patch("spatialexistence.jobs.deploy.async_session_factory", session_factory):
            deployment = await run_deploy("bafyabc", DEPLOYER, clock=clock)

        engine = get_engine()

        assert engine is deployment.engine
        assert engine.owner_of(1) == DEPLOYER
        assert engine.deployed_at == clock.now

    async def test_restart_restores_deployment(self, session_factory, clock) -> None:
        """A service started after the deploy sees the same collection."""
        with patch("spatialexistence.jobs.deploy.async_session_factory", session_factory):
            await run_deploy("bafyabc", DEPLOYER, clock=clock)
        deployed_at = clock.now
        reset_engine()

        clock.advance(1)
        async with session_factory() as session:
            restored = await load_engine(session, clock=clock)

        assert restored.owner == DEPLOYER
        assert restored.owner_of(1) == DEPLOYER
        assert restored.deployed_at == deployed_at
        assert restored.token_uri(1) == "ipfs://bafyabc/1a.json"
        assert restored.mint("0xalice", restored.mint_price) == 2


class TestAssetJobs:
    def test_convert_then_generate(self, tmp_path: Path) -> None:
        originals = tmp_path / "originals"
        originals.mkdir()
        for token_id in range(1, 5):
            for suffix in "abc":
                Image.new("RGBA", (4, 4), (0, 0, 0, 255)).save(
                    originals / f"{token_id}{suffix}.png"
                )

        blobs = run_convert(originals, tmp_path / "svgs")
        documents = run_generate(tmp_path / "svgs", tmp_path / "metadata")

        assert len(blobs) == 12
        assert len(documents) == 12
        assert (tmp_path / "metadata" / "4c.json").exists()

    def test_convert_failure_propagates(self, tmp_path: Path) -> None:
        with pytest.raises(AssetPipelineError):
            run_convert(tmp_path / "missing", tmp_path / "svgs")

    def test_generate_failure_propagates(self, tmp_path: Path) -> None:
        (tmp_path / "svgs").mkdir()

        with pytest.raises(AssetPipelineError):
            run_generate(tmp_path / "svgs", tmp_path / "metadata")
