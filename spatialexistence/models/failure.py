"""
Failure Envelope — Classified Rejections for Token Operations.

Every rejected operation on the collection is a known, explainable failure.
No rejection is retried or recovered internally: the error propagates to the
caller and the API turns it into a classified response.

INVARIANT: A failed operation leaves no partial state behind.

Error taxonomy:
- InsufficientFundsError: payment below the current price
- AlreadyMintedError: address has already minted once
- SupplyExhaustedError: all four tokens are minted
- TokenNotFoundError: token id was never minted
- NotTokenOwnerError: caller does not currently own the token
- AlreadyClaimedError: token was claimed before
- UnauthorizedError: caller is not the collection owner
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"

    # Payment failures
    INSUFFICIENT_FUNDS = "insufficient_funds"

    # Lifecycle constraint violations
    ALREADY_MINTED = "already_minted"
    SUPPLY_EXHAUSTED = "supply_exhausted"
    ALREADY_CLAIMED = "already_claimed"

    # Access control
    NOT_TOKEN_OWNER = "not_token_owner"
    UNAUTHORIZED = "unauthorized"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="Short reason the operation was rejected",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the caller",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Response envelope for classified outcomes.

    Successful calls return their payload directly; rejections are wrapped
    in this envelope so the caller always sees why an operation failed.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


# =============================================================================
# LIFECYCLE ERRORS
# =============================================================================


class InsufficientFundsError(KnownError):
    """Payment is below the price required for a mint or claim."""

    def __init__(self, paid: int, required: int):
        self.paid = paid
        self.required = required
        super().__init__(
            kind=FailureKind.INSUFFICIENT_FUNDS,
            message="Insufficient ETH",
            detail=f"Paid {paid} wei, required {required} wei",
            suggestion="Send at least the current price.",
            status_code=402,
        )


class AlreadyMintedError(KnownError):
    """The address has already used its single mint."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(
            kind=FailureKind.ALREADY_MINTED,
            message="Already minted",
            detail=f"Address {address} has already minted",
            status_code=409,
        )


class SupplyExhaustedError(KnownError):
    """Every token slot is already minted."""

    def __init__(self, total_supply: int):
        self.total_supply = total_supply
        super().__init__(
            kind=FailureKind.SUPPLY_EXHAUSTED,
            message="All minted",
            detail=f"All {total_supply} tokens have been minted",
            status_code=409,
        )


class TokenNotFoundError(KnownError):
    """The token id does not reference a minted token."""

    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message="Token does not exist",
            detail=f"Token #{token_id} has not been minted",
            status_code=404,
        )


class NotTokenOwnerError(KnownError):
    """The caller is not the current owner of the token."""

    def __init__(self, address: str, token_id: int):
        self.address = address
        self.token_id = token_id
        super().__init__(
            kind=FailureKind.NOT_TOKEN_OWNER,
            message="Not token owner",
            detail=f"Address {address} does not own token #{token_id}",
            status_code=403,
        )


class AlreadyClaimedError(KnownError):
    """The token has been claimed before."""

    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(
            kind=FailureKind.ALREADY_CLAIMED,
            message="Already claimed",
            detail=f"Token #{token_id} is already claimed",
            status_code=409,
        )


class UnauthorizedError(KnownError):
    """An owner-only operation was called by another account."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(
            kind=FailureKind.UNAUTHORIZED,
            message="Caller is not the owner",
            detail=f"Address {address} is not the collection owner",
            status_code=403,
        )


# =============================================================================
# ASSET PIPELINE ERRORS
# =============================================================================


class AssetPipelineError(KnownError):
    """A source image or embedded-SVG blob is missing or unreadable."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Cannot process asset {path}",
            detail=reason,
            suggestion="Check the originals and svgs directories.",
        )
