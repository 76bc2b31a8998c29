"""
Notifications emitted by successful collection mutations.

Events are plain frozen records, decoupled from how they are stored or
delivered. The API persists them to the token event ledger.
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class TokenMinted:
    kind: ClassVar[str] = "TokenMinted"

    minter: str
    token_id: int
    paid: int


@dataclass(frozen=True)
class TokenClaimed:
    kind: ClassVar[str] = "TokenClaimed"

    claimer: str
    token_id: int
    paid: int


@dataclass(frozen=True)
class TokenTransferred:
    kind: ClassVar[str] = "TokenTransferred"

    sender: str
    recipient: str
    token_id: int


@dataclass(frozen=True)
class MintPriceUpdated:
    kind: ClassVar[str] = "MintPriceUpdated"

    old_price: int
    new_price: int


@dataclass(frozen=True)
class ClaimPriceUpdated:
    kind: ClassVar[str] = "ClaimPriceUpdated"

    old_price: int
    new_price: int


@dataclass(frozen=True)
class Withdraw:
    kind: ClassVar[str] = "Withdraw"

    recipient: str
    amount: int


TokenEvent = (
    TokenMinted
    | TokenClaimed
    | TokenTransferred
    | MintPriceUpdated
    | ClaimPriceUpdated
    | Withdraw
)
