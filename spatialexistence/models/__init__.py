from spatialexistence.models.events import (
    ClaimPriceUpdated,
    MintPriceUpdated,
    TokenClaimed,
    TokenEvent,
    TokenMinted,
    TokenTransferred,
    Withdraw,
)
from spatialexistence.models.failure import (
    AlreadyClaimedError,
    AlreadyMintedError,
    ApiResponse,
    AssetPipelineError,
    FailureDetail,
    FailureKind,
    InsufficientFundsError,
    KnownError,
    NotTokenOwnerError,
    OutcomeType,
    SupplyExhaustedError,
    TokenNotFoundError,
    UnauthorizedError,
)
from spatialexistence.models.metadata import TokenMetadata
from spatialexistence.models.token import PhaseInfo, Token

__all__ = [
    "AlreadyClaimedError",
    "AlreadyMintedError",
    "ApiResponse",
    "AssetPipelineError",
    "ClaimPriceUpdated",
    "FailureDetail",
    "FailureKind",
    "InsufficientFundsError",
    "KnownError",
    "MintPriceUpdated",
    "NotTokenOwnerError",
    "OutcomeType",
    "PhaseInfo",
    "SupplyExhaustedError",
    "Token",
    "TokenClaimed",
    "TokenEvent",
    "TokenMetadata",
    "TokenMinted",
    "TokenNotFoundError",
    "TokenTransferred",
    "UnauthorizedError",
    "Withdraw",
]
