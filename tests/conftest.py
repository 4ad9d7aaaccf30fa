"""
Shared Test Fixtures

Provides a controllable clock, an in-memory store and a ledger wired to both.

Files that USE this module:
- pytest (fixtures injected into every test module)

Files that this module USES:
- exbook.adapters.persistence.kv_store (MemoryStore)
- exbook.application.ledger (ExchangeLedger)
"""
import pytest  # Testing framework for writing and running tests

from exbook.adapters.persistence.kv_store import MemoryStore  # In-memory key-value store
from exbook.application.ledger import ExchangeLedger  # Ledger under test

START_MS = 1_760_000_000_000  # 2025-10-09, epoch milliseconds


class FakeClock:
    """Callable clock returning a settable epoch-milliseconds value."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ledger(store, clock):
    return ExchangeLedger(store=store, clock=clock)
