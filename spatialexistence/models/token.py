from dataclasses import dataclass


@dataclass
class Token:
    """
    One of the four token slots once it has been minted.

    Attributes:
        token_id: 1-based id assigned in mint order
        owner: Current owner address
        claimed: True once the owner has paid the claim (one-way)
    """

    token_id: int
    owner: str
    claimed: bool = False


@dataclass(frozen=True)
class PhaseInfo:
    """Currently active artwork phase."""

    index: int  # 0, 1 or 2
    suffix: str  # a, b or c
    name: str
