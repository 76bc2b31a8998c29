"""Tests for the failure envelope and the lifecycle error taxonomy."""

import pytest

from spatialexistence.models.failure import (
    AlreadyClaimedError,
    AlreadyMintedError,
    ApiResponse,
    FailureKind,
    InsufficientFundsError,
    KnownError,
    NotTokenOwnerError,
    OutcomeType,
    SupplyExhaustedError,
    TokenNotFoundError,
    UnauthorizedError,
)


@pytest.mark.parametrize(
    ("error", "kind", "status_code", "message"),
    [
        (InsufficientFundsError(1, 2), FailureKind.INSUFFICIENT_FUNDS, 402, "Insufficient ETH"),
        (AlreadyMintedError("0xa"), FailureKind.ALREADY_MINTED, 409, "Already minted"),
        (SupplyExhaustedError(4), FailureKind.SUPPLY_EXHAUSTED, 409, "All minted"),
        (TokenNotFoundError(999), FailureKind.NOT_FOUND, 404, "Token does not exist"),
        (NotTokenOwnerError("0xa", 1), FailureKind.NOT_TOKEN_OWNER, 403, "Not token owner"),
        (AlreadyClaimedError(1), FailureKind.ALREADY_CLAIMED, 409, "Already claimed"),
        (UnauthorizedError("0xa"), FailureKind.UNAUTHORIZED, 403, "Caller is not the owner"),
    ],
)
def test_error_classification(
    error: KnownError, kind: FailureKind, status_code: int, message: str
) -> None:
    assert isinstance(error, KnownError)
    assert error.kind == kind
    assert error.status_code == status_code
    assert str(error) == message


def test_to_response_is_known_failure() -> None:
    response = InsufficientFundsError(paid=5, required=10).to_response()

    assert response.outcome == OutcomeType.KNOWN_FAILURE
    assert response.data is None
    assert response.failure is not None
    assert response.failure.detail == "Paid 5 wei, required 10 wei"


def test_success_response() -> None:
    response = ApiResponse.success({"token_id": 1})

    assert response.outcome == OutcomeType.SUCCESS
    assert response.failure is None
