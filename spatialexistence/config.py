from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "SpatialExistence"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/spatialexistence"

    # Metadata location; must end with a slash
    ipfs_cid: str = "your_ipfs_cid_here"
    base_uri: str = "ipfs://your_ipfs_cid_here/"

    owner_address: str = "0x0000000000000000000000000000000000000001"

    mint_price_wei: int = 150_000_000_000_000_000  # 0.15 ETH
    claim_price_wei: int = 500_000_000_000_000_000  # 0.5 ETH

    # ~4 months per phase
    phase_duration_seconds: int = 4 * 30 * 24 * 60 * 60

    # Asset pipeline directories
    originals_dir: str = "originals"
    svg_dir: str = "svgs"
    metadata_dir: str = "metadata"

    collection_name: str = "Spatial Existence"
    collection_description: str = "Description of the project goes here.."


settings = Settings()


# =============================================================================
# COLLECTION CONSTANTS
# =============================================================================

TOTAL_SUPPLY = 4

PHASE_COUNT = 3

# Phase index -> metadata file suffix
PHASE_SUFFIXES = ("a", "b", "c")

PHASE_NAMES = ("Phase 1", "Phase 2", "Phase 3")
