# src/exbook/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Exchange rates (buy/sell)
- Vault balances (physical LBP and USD cash)
- Box balances (My Box / His Box attribution ledgers)
- Transactions and quota/premium state
- The full ledger snapshot persisted as one unit

Files that USE this module:
- exbook.domain.exchange (quote calculation)
- exbook.application.* (ledger and backup services)
- exbook.adapters.* (persistence, export, formatting)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

USD = "usd"
LBP = "lbp"

DEFAULT_BUY_RATE = 98000.0
DEFAULT_SELL_RATE = 100000.0
DEFAULT_LBP_BALANCE = 500_000_000.0
DEFAULT_USD_BALANCE = 6_500.0
DEFAULT_FREE_LIMIT = 10

DAY_MS = 24 * 60 * 60 * 1000


class PremiumStatus(str, Enum):
    """Subscription state as seen at a given instant."""
    FREE = "free"
    PREMIUM = "premium"
    EXPIRED = "expired"  # premium flag still set, expiry already passed


@dataclass(frozen=True)
class ExchangeRates:
    """
    Buy and sell rates in LBP per 1 USD.

    Attributes:
        buy_rate: LBP paid by the shop per USD bought from a customer
        sell_rate: LBP received by the shop per USD sold to a customer
    """
    buy_rate: float = DEFAULT_BUY_RATE
    sell_rate: float = DEFAULT_SELL_RATE

    @property
    def spread(self) -> float:
        """Shop margin per USD traded, in LBP."""
        return self.sell_rate - self.buy_rate


@dataclass(frozen=True)
class VaultBalances:
    """Physical cash on hand."""
    lbp: float = DEFAULT_LBP_BALANCE
    usd: float = DEFAULT_USD_BALANCE


@dataclass(frozen=True)
class BoxBalances:
    """Cumulative principal attributed to each partner, in LBP."""
    my_box: float = 0.0
    his_box: float = 0.0


@dataclass(frozen=True)
class Transaction:
    """
    One completed trade. Never mutated after creation.

    Attributes:
        input_currency: "usd" or "lbp", what the customer paid with
        amount: Quantity paid, in input_currency
        result: Quantity the customer received, in the other currency
        rate: Rate applied (buy rate for USD input, sell rate for LBP input)
        from_currency: "USD" or "LBP"
        to_currency: "LBP" or "USD"
        to_my_box: True when the principal is attributed to My Box
        profit: Spread earned, always in LBP
        timestamp: Epoch milliseconds
    """
    input_currency: str
    amount: float
    result: float
    rate: float
    from_currency: str
    to_currency: str
    to_my_box: bool
    profit: float
    timestamp: int


@dataclass(frozen=True)
class QuotaState:
    """
    Free-tier counter and premium subscription flags.

    Attributes:
        transaction_count: Transactions recorded since the last history clear
        free_limit: Allowance for non-premium users
        is_premium: Premium flag as granted by the admin
        premium_expiry: Epoch milliseconds when premium ends, or None
    """
    transaction_count: int = 0
    free_limit: int = DEFAULT_FREE_LIMIT
    is_premium: bool = False
    premium_expiry: Optional[int] = None

    def status(self, now: int) -> PremiumStatus:
        if not self.is_premium:
            return PremiumStatus.FREE
        if self.premium_expiry is not None and self.premium_expiry < now:
            return PremiumStatus.EXPIRED
        return PremiumStatus.PREMIUM

    @property
    def quota_reached(self) -> bool:
        """True when a free-tier user cannot record another transaction."""
        return not self.is_premium and self.transaction_count >= self.free_limit

    @property
    def remaining(self) -> Optional[int]:
        """Transactions left on the free tier, None when premium."""
        if self.is_premium:
            return None
        return max(self.free_limit - self.transaction_count, 0)


@dataclass(frozen=True)
class LedgerState:
    """Complete ledger snapshot, persisted and rolled back as one unit."""
    rates: ExchangeRates = field(default_factory=ExchangeRates)
    vault: VaultBalances = field(default_factory=VaultBalances)
    boxes: BoxBalances = field(default_factory=BoxBalances)
    transactions: Tuple[Transaction, ...] = ()
    quota: QuotaState = field(default_factory=QuotaState)

    @property
    def total_profit(self) -> float:
        return sum(t.profit for t in self.transactions)


@dataclass(frozen=True)
class AdminSettings:
    """
    Globally pushed settings. Fields left as None are not applied.

    Attributes:
        global_buy_rate: Buy rate overriding the local one
        global_sell_rate: Sell rate overriding the local one
        free_transaction_limit: Free-tier allowance
    """
    global_buy_rate: Optional[float] = None
    global_sell_rate: Optional[float] = None
    free_transaction_limit: Optional[int] = None


@dataclass(frozen=True)
class TransactionResult:
    """What record_transaction hands back to the caller."""
    result: float
    profit: float
    to_my_box: bool
    description: str
    transaction: Transaction
