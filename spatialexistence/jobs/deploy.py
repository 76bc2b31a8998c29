"""
Deploy the collection.

Builds the base URI from the IPFS folder CID, creates the lifecycle engine
with the deployer as owner and mints token #1 to the deployer. The
deployment parameters and the mint are committed together, and the engine
becomes the process engine. A service started later rebuilds the same
engine from the stored deployment and its ledger.
"""

import argparse
import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from spatialexistence.config import settings
from spatialexistence.db.database import async_session_factory, init_db
from spatialexistence.db.operations import record_events, save_deployment
from spatialexistence.services.lifecycle import (
    TokenLifecycleEngine,
    capture_events,
    install_engine,
)

logger = logging.getLogger(__name__)


@dataclass
class Deployment:
    """Outcome of a deployment run."""

    engine: TokenLifecycleEngine
    base_uri: str
    minted_token_id: int


def build_base_uri(cid: str) -> str:
    """IPFS base URI for a folder CID, always with a trailing slash."""
    return f"ipfs://{cid.strip().strip('/')}/"


async def run_deploy(
    cid: str,
    deployer: str,
    clock: Callable[[], float] = time.time,
) -> Deployment:
    """
    Deploy and mint the first token to the deployer.

    Args:
        cid: IPFS folder CID holding the metadata documents
        deployer: Address that owns the collection and receives token #1
        clock: Time source; its reading at deployment anchors the phases

    Returns:
        The deployment, including the live engine
    """
    logger.info("Deploying from: %s", deployer)

    base_uri = build_base_uri(cid)
    engine = TokenLifecycleEngine(
        base_uri=base_uri,
        owner=deployer,
        mint_price=settings.mint_price_wei,
        claim_price=settings.claim_price_wei,
        phase_duration=settings.phase_duration_seconds,
        clock=clock,
    )
    logger.info("baseURI: %s", base_uri)

    with capture_events(engine) as events:
        token_id = engine.mint(deployer, engine.mint_price)
    logger.info("Minted token #%d", token_id)

    async with async_session_factory() as session:
        await save_deployment(session, engine)
        await record_events(session, events)
        await session.commit()

    install_engine(engine)
    return Deployment(engine=engine, base_uri=base_uri, minted_token_id=token_id)


async def _deploy_with_ledger(cid: str, deployer: str) -> Deployment:
    await init_db()
    return await run_deploy(cid, deployer)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = argparse.ArgumentParser(description="Deploy the collection and mint token #1")
    parser.add_argument(
        "--cid",
        default=settings.ipfs_cid,
        help="IPFS folder CID of the metadata documents",
    )
    parser.add_argument(
        "--deployer",
        default=settings.owner_address,
        help="Deployer (owner) address",
    )
    args = parser.parse_args()

    asyncio.run(_deploy_with_ledger(args.cid, args.deployer))


if __name__ == "__main__":
    main()
