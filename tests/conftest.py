import pytest

from spatialexistence.services.lifecycle import TokenLifecycleEngine, reset_engine

BASE_URI = "http://example.com/"
PHASE = 4 * 30 * 24 * 60 * 60

MINT_PRICE = 150_000_000_000_000_000
CLAIM_PRICE = 500_000_000_000_000_000

OWNER = "0xowner"
ALICE = "0xalice"
BOB = "0xbob"
CAROL = "0xcarol"


class FakeClock:
    """Controllable clock; only advances when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_global_engine():
    """Drop the process-wide engine between tests."""
    reset_engine()
    yield
    reset_engine()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> TokenLifecycleEngine:
    """Freshly deployed collection owned by OWNER."""
    return TokenLifecycleEngine(
        base_uri=BASE_URI,
        owner=OWNER,
        mint_price=MINT_PRICE,
        claim_price=CLAIM_PRICE,
        phase_duration=PHASE,
        clock=clock,
    )
