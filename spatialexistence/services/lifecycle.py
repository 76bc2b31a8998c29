"""
Token Lifecycle Engine — Minting, Claiming and Phase Rotation.

Tracks the four token slots of the collection, the addresses that have
minted, the accumulated payments, and derives the active artwork phase from
the time elapsed since deployment.

INVARIANTS:
- At most TOTAL_SUPPLY tokens are ever minted, ids assigned 1..4 in order
- An address mints at most once, ever (independent of later ownership)
- A token is claimed at most once
- Prices and withdrawals are restricted to the collection owner
- deployed_at is fixed at construction
- Only the most recent EVENT_HISTORY_LIMIT events are kept in memory;
  the ledger holds the full history

ENFORCEMENT:
- Every operation runs under one lock and evaluates all of its checks
  before mutating anything, so a rejected call leaves no trace
- Check order is part of the contract (first failing check wins)

Per-token state machine: Unminted -> Minted -> Claimed.
"""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock

from spatialexistence.config import (
    PHASE_COUNT,
    PHASE_NAMES,
    PHASE_SUFFIXES,
    TOTAL_SUPPLY,
    settings,
)
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
    InsufficientFundsError,
    NotTokenOwnerError,
    SupplyExhaustedError,
    TokenNotFoundError,
    UnauthorizedError,
)
from spatialexistence.models.token import PhaseInfo, Token

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
EventListener = Callable[[TokenEvent], None]

EVENT_HISTORY_LIMIT = 256


@dataclass(frozen=True)
class EngineCheckpoint:
    """Copy of the mutable engine state, taken by checkpoint()."""

    tokens: tuple[Token, ...]
    has_minted: frozenset[str]
    credits: tuple[tuple[str, int], ...]
    balance: int
    mint_price: int
    claim_price: int
    events: tuple[TokenEvent, ...]


class TokenLifecycleEngine:
    """
    Thread-safe state machine for the collection.

    Args:
        base_uri: Prefix under which metadata documents are addressed
        owner: Privileged account for prices and withdrawals
        mint_price: Initial mint price in wei
        claim_price: Initial claim price in wei
        phase_duration: Seconds each phase stays active
        clock: Callable returning the current time in seconds
        deployed_at: Deployment timestamp; read from the clock when omitted
    """

    def __init__(
        self,
        base_uri: str,
        owner: str,
        mint_price: int = settings.mint_price_wei,
        claim_price: int = settings.claim_price_wei,
        phase_duration: int = settings.phase_duration_seconds,
        clock: Clock = time.time,
        deployed_at: float | None = None,
    ):
        if phase_duration <= 0:
            raise ValueError(f"phase_duration must be positive, got {phase_duration}")

        self._base_uri = base_uri
        self._owner = owner
        self._phase_duration = phase_duration
        self._clock = clock
        self._deployed_at = clock() if deployed_at is None else deployed_at

        self._mint_price = mint_price
        self._claim_price = claim_price
        self._balance = 0

        self._tokens: dict[int, Token] = {}
        self._has_minted: set[str] = set()
        self._credits: dict[str, int] = {}

        self._events: deque[TokenEvent] = deque(maxlen=EVENT_HISTORY_LIMIT)
        self._listeners: list[EventListener] = []
        self._lock = Lock()

        # Held by async callers across a mutation and its ledger write
        self.write_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Immutable properties
    # -------------------------------------------------------------------------

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def deployed_at(self) -> float:
        return self._deployed_at

    @property
    def phase_duration(self) -> int:
        return self._phase_duration

    @property
    def total_supply(self) -> int:
        return TOTAL_SUPPLY

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def subscribe(self, listener: EventListener) -> None:
        """
        Register a callback invoked synchronously for every new event.

        Listeners run while the engine lock is held and must not call back
        into the engine.
        """
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        with self._lock:
            self._listeners.remove(listener)

    @property
    def events(self) -> list[TokenEvent]:
        """Copy of the most recent events, oldest first."""
        with self._lock:
            return list(self._events)

    def _emit(self, event: TokenEvent) -> None:
        # Caller holds the lock
        self._events.append(event)
        for listener in list(self._listeners):
            listener(event)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def mint(self, caller: str, paid_amount: int) -> int:
        """
        Mint the next token to the caller.

        Order of checks:
        1. Payment covers the mint price
        2. Caller has never minted
        3. Supply is not exhausted

        Returns:
            The assigned token id (1..4)

        Raises:
            InsufficientFundsError, AlreadyMintedError, SupplyExhaustedError
        """
        with self._lock:
            if paid_amount < self._mint_price:
                logger.warning(
                    "MINT_REJECTED",
                    extra={"caller": caller, "reason": "insufficient_funds"},
                )
                raise InsufficientFundsError(paid_amount, self._mint_price)

            if caller in self._has_minted:
                logger.warning(
                    "MINT_REJECTED",
                    extra={"caller": caller, "reason": "already_minted"},
                )
                raise AlreadyMintedError(caller)

            if len(self._tokens) >= TOTAL_SUPPLY:
                logger.warning(
                    "MINT_REJECTED",
                    extra={"caller": caller, "reason": "supply_exhausted"},
                )
                raise SupplyExhaustedError(TOTAL_SUPPLY)

            token_id = len(self._tokens) + 1
            self._tokens[token_id] = Token(token_id=token_id, owner=caller)
            self._has_minted.add(caller)
            self._balance += paid_amount

            logger.info("TOKEN_MINTED", extra={"caller": caller, "token_id": token_id})
            self._emit(TokenMinted(minter=caller, token_id=token_id, paid=paid_amount))
            return token_id

    def claim(self, caller: str, token_id: int, paid_amount: int) -> None:
        """
        Claim a token the caller currently owns.

        Ownership is checked at call time, so a token received through a
        transfer can be claimed by its new owner.

        Order of checks:
        1. Token exists
        2. Caller owns it
        3. Payment covers the claim price
        4. Token is not yet claimed

        Raises:
            TokenNotFoundError, NotTokenOwnerError, InsufficientFundsError,
            AlreadyClaimedError
        """
        with self._lock:
            token = self._tokens.get(token_id)
            if token is None:
                self._log_rejection("CLAIM_REJECTED", caller, token_id, "token_not_found")
                raise TokenNotFoundError(token_id)

            if token.owner != caller:
                self._log_rejection("CLAIM_REJECTED", caller, token_id, "not_token_owner")
                raise NotTokenOwnerError(caller, token_id)

            if paid_amount < self._claim_price:
                self._log_rejection("CLAIM_REJECTED", caller, token_id, "insufficient_funds")
                raise InsufficientFundsError(paid_amount, self._claim_price)

            if token.claimed:
                self._log_rejection("CLAIM_REJECTED", caller, token_id, "already_claimed")
                raise AlreadyClaimedError(token_id)

            token.claimed = True
            self._balance += paid_amount

            logger.info("TOKEN_CLAIMED", extra={"caller": caller, "token_id": token_id})
            self._emit(TokenClaimed(claimer=caller, token_id=token_id, paid=paid_amount))

    def transfer(self, caller: str, recipient: str, token_id: int) -> None:
        """
        Move a token to another address.

        Neither the sender's mint record nor the claimed flag change.

        Raises:
            TokenNotFoundError, NotTokenOwnerError
        """
        with self._lock:
            token = self._tokens.get(token_id)
            if token is None:
                self._log_rejection("TRANSFER_REJECTED", caller, token_id, "token_not_found")
                raise TokenNotFoundError(token_id)

            if token.owner != caller:
                self._log_rejection("TRANSFER_REJECTED", caller, token_id, "not_token_owner")
                raise NotTokenOwnerError(caller, token_id)

            token.owner = recipient

            logger.info(
                "TOKEN_TRANSFERRED",
                extra={"sender": caller, "recipient": recipient, "token_id": token_id},
            )
            self._emit(TokenTransferred(sender=caller, recipient=recipient, token_id=token_id))

    def set_mint_price(self, caller: str, new_price: int) -> None:
        """Replace the mint price. Owner only."""
        with self._lock:
            self._require_owner(caller)
            old_price = self._mint_price
            self._mint_price = new_price

            logger.info("MINT_PRICE_UPDATED", extra={"old": old_price, "new": new_price})
            self._emit(MintPriceUpdated(old_price=old_price, new_price=new_price))

    def set_claim_price(self, caller: str, new_price: int) -> None:
        """Replace the claim price. Owner only."""
        with self._lock:
            self._require_owner(caller)
            old_price = self._claim_price
            self._claim_price = new_price

            logger.info("CLAIM_PRICE_UPDATED", extra={"old": old_price, "new": new_price})
            self._emit(ClaimPriceUpdated(old_price=old_price, new_price=new_price))

    def withdraw(self, caller: str) -> int:
        """
        Pay out the entire balance to the owner.

        The balance is read and zeroed in the same critical section.

        Returns:
            The amount credited to the owner
        """
        with self._lock:
            self._require_owner(caller)
            amount = self._balance
            self._balance = 0
            self._credits[self._owner] = self._credits.get(self._owner, 0) + amount

            logger.info("WITHDRAW", extra={"recipient": self._owner, "amount": amount})
            self._emit(Withdraw(recipient=self._owner, amount=amount))
            return amount

    # -------------------------------------------------------------------------
    # Checkpoints and replay
    # -------------------------------------------------------------------------

    def checkpoint(self) -> EngineCheckpoint:
        """Capture the mutable state so a later restore() can return to it."""
        with self._lock:
            return EngineCheckpoint(
                tokens=tuple(
                    Token(token_id=t.token_id, owner=t.owner, claimed=t.claimed)
                    for t in self._tokens.values()
                ),
                has_minted=frozenset(self._has_minted),
                credits=tuple(self._credits.items()),
                balance=self._balance,
                mint_price=self._mint_price,
                claim_price=self._claim_price,
                events=tuple(self._events),
            )

    def restore(self, checkpoint: EngineCheckpoint) -> None:
        """
        Return to a previously captured state.

        Mutations applied since the checkpoint are discarded without
        emitting events.
        """
        with self._lock:
            self._tokens = {
                t.token_id: Token(token_id=t.token_id, owner=t.owner, claimed=t.claimed)
                for t in checkpoint.tokens
            }
            self._has_minted = set(checkpoint.has_minted)
            self._credits = dict(checkpoint.credits)
            self._balance = checkpoint.balance
            self._mint_price = checkpoint.mint_price
            self._claim_price = checkpoint.claim_price
            self._events = deque(checkpoint.events, maxlen=EVENT_HISTORY_LIMIT)

            logger.warning("ENGINE_RESTORED", extra={"minted": len(self._tokens)})

    def replay(self, events: Iterable[TokenEvent]) -> int:
        """
        Re-apply recorded events through the regular operations.

        Every event passes the same checks it passed when first applied,
        so an inconsistent history raises the corresponding KnownError.

        Returns:
            Number of events applied
        """
        count = 0
        for event in events:
            if isinstance(event, TokenMinted):
                self.mint(event.minter, event.paid)
            elif isinstance(event, TokenClaimed):
                self.claim(event.claimer, event.token_id, event.paid)
            elif isinstance(event, TokenTransferred):
                self.transfer(event.sender, event.recipient, event.token_id)
            elif isinstance(event, MintPriceUpdated):
                self.set_mint_price(self._owner, event.new_price)
            elif isinstance(event, ClaimPriceUpdated):
                self.set_claim_price(self._owner, event.new_price)
            elif isinstance(event, Withdraw):
                self.withdraw(self._owner)
            count += 1

        logger.info("ENGINE_REPLAYED", extra={"events": count})
        return count

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def current_phase(self) -> int:
        """
        Index of the active phase (0, 1 or 2).

        Derived from the clock on every call and never stored; two calls
        may differ when a phase boundary is crossed in between.
        """
        elapsed = self._clock() - self._deployed_at
        return int(elapsed // self._phase_duration) % PHASE_COUNT

    def phase_info(self) -> PhaseInfo:
        index = self.current_phase()
        return PhaseInfo(index=index, suffix=PHASE_SUFFIXES[index], name=PHASE_NAMES[index])

    def token_uri(self, token_id: int) -> str:
        """
        Metadata locator for a token in the current phase.

        Format: {base_uri}{token_id}{suffix}.json
        """
        with self._lock:
            self._require_token(token_id)
            suffix = PHASE_SUFFIXES[self.current_phase()]
        return f"{self._base_uri}{token_id}{suffix}.json"

    def owner_of(self, token_id: int) -> str:
        with self._lock:
            return self._require_token(token_id).owner

    def is_claimed(self, token_id: int) -> bool:
        with self._lock:
            return self._require_token(token_id).claimed

    def get_token(self, token_id: int) -> Token:
        """Snapshot of a minted token."""
        with self._lock:
            token = self._require_token(token_id)
            return Token(token_id=token.token_id, owner=token.owner, claimed=token.claimed)

    def tokens(self) -> list[Token]:
        """Snapshots of all minted tokens, ordered by id."""
        with self._lock:
            return [
                Token(token_id=t.token_id, owner=t.owner, claimed=t.claimed)
                for t in sorted(self._tokens.values(), key=lambda t: t.token_id)
            ]

    def has_minted(self, address: str) -> bool:
        with self._lock:
            return address in self._has_minted

    def credited(self, address: str) -> int:
        """Total amount withdrawn to an address."""
        with self._lock:
            return self._credits.get(address, 0)

    @property
    def minted_count(self) -> int:
        with self._lock:
            return len(self._tokens)

    @property
    def balance(self) -> int:
        with self._lock:
            return self._balance

    @property
    def mint_price(self) -> int:
        with self._lock:
            return self._mint_price

    @property
    def claim_price(self) -> int:
        with self._lock:
            return self._claim_price

    # -------------------------------------------------------------------------
    # Guards (caller holds the lock)
    # -------------------------------------------------------------------------

    def _require_token(self, token_id: int) -> Token:
        token = self._tokens.get(token_id)
        if token is None:
            raise TokenNotFoundError(token_id)
        return token

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            logger.warning("UNAUTHORIZED_CALL", extra={"caller": caller})
            raise UnauthorizedError(caller)

    @staticmethod
    def _log_rejection(event: str, caller: str, token_id: int, reason: str) -> None:
        logger.warning(event, extra={"caller": caller, "token_id": token_id, "reason": reason})


@contextmanager
def capture_events(engine: TokenLifecycleEngine) -> Iterator[list[TokenEvent]]:
    """
    Collect the events an engine emits while the block runs.

    Usage:
        with capture_events(engine) as events:
            engine.mint(caller, value)
        await record_events(session, events)
    """
    captured: list[TokenEvent] = []
    engine.subscribe(captured.append)
    try:
        yield captured
    finally:
        engine.unsubscribe(captured.append)


# =============================================================================
# GLOBAL ENGINE INSTANCE
# =============================================================================

# Singleton engine for the service lifetime
_engine: TokenLifecycleEngine | None = None


def get_engine() -> TokenLifecycleEngine:
    """Get the global engine, creating it from settings on first use."""
    global _engine
    if _engine is None:
        _engine = TokenLifecycleEngine(
            base_uri=settings.base_uri,
            owner=settings.owner_address,
            mint_price=settings.mint_price_wei,
            claim_price=settings.claim_price_wei,
            phase_duration=settings.phase_duration_seconds,
        )
        logger.info(
            "ENGINE_CREATED",
            extra={"base_uri": settings.base_uri, "owner": settings.owner_address},
        )
    return _engine


def install_engine(engine: TokenLifecycleEngine) -> None:
    """Make an engine the one returned by get_engine()."""
    global _engine
    _engine = engine
    logger.info(
        "ENGINE_INSTALLED",
        extra={"base_uri": engine.base_uri, "owner": engine.owner, "minted": engine.minted_count},
    )


def reset_engine() -> None:
    """Reset the global engine (for testing)."""
    global _engine
    _engine = None
