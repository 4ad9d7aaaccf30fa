# src/exbook/domain/exchange.py
"""
Exchange Calculation - Pure Quote Logic

Turns a customer payment into the amount paid out, the profit earned, and the
balance deltas the ledger must apply. Two scenarios exist:

- Customer pays USD, receives LBP at the buy rate. Principal goes to My Box.
- Customer pays LBP, receives USD at the sell rate. Principal goes to His Box.

Profit is denominated in LBP in both scenarios: in the LBP-input case the
USD paid out is multiplied by the spread (LBP per USD), which yields LBP.

Files that USE this module:
- exbook.application.ledger (ExchangeLedger.record_transaction)
- tests.test_exchange (unit tests)

Files that this module USES:
- exbook.domain.models (ExchangeRates, currency codes)
- exbook.domain.errors (InvalidAmountError, InvalidCurrencyError)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from exbook.domain.errors import InvalidAmountError, InvalidCurrencyError
from exbook.domain.models import LBP, USD, ExchangeRates, Transaction


def _check_finite(amount: float, result: float, profit: float) -> None:
    if not (math.isfinite(result) and math.isfinite(profit)):
        raise InvalidAmountError(f"Amount too large to exchange: {amount!r}")


def _plain(value: float) -> str:
    """Render a number without a trailing .0 for whole values."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Quote:
    """Computed outcome of a trade before it is committed."""
    input_currency: str
    amount: float
    result: float
    rate: float
    profit: float
    from_currency: str
    to_currency: str
    to_my_box: bool
    description: str

    @property
    def box_increment(self) -> float:
        """LBP principal moved by this trade (result for USD input, amount for LBP input)."""
        return self.result if self.input_currency == USD else self.amount

    @property
    def vault_delta(self) -> Tuple[float, float]:
        """(lbp_delta, usd_delta) from the shop's point of view."""
        if self.input_currency == USD:
            return -self.result, self.amount
        return self.amount, -self.result

    def to_transaction(self, timestamp: int) -> Transaction:
        return Transaction(
            input_currency=self.input_currency,
            amount=self.amount,
            result=self.result,
            rate=self.rate,
            from_currency=self.from_currency,
            to_currency=self.to_currency,
            to_my_box=self.to_my_box,
            profit=self.profit,
            timestamp=timestamp,
        )


def quote(input_currency: str, amount: float, rates: ExchangeRates) -> Quote:
    """
    Price a trade at the given rates.

    Args:
        input_currency: "usd" or "lbp", the currency the customer pays with
        amount: Quantity paid (validated by the caller)
        rates: Current buy/sell rates

    Returns:
        Quote with result, profit, box attribution and description

    Raises:
        InvalidAmountError: If the amount is too large to price
        InvalidCurrencyError: If input_currency is not "usd" or "lbp"
    """
    currency = str(input_currency).lower()

    if currency == USD:
        result = amount * rates.buy_rate
        _check_finite(amount, result, amount * rates.spread)
        return Quote(
            input_currency=USD,
            amount=amount,
            result=result,
            rate=rates.buy_rate,
            profit=amount * rates.spread,
            from_currency="USD",
            to_currency="LBP",
            to_my_box=True,
            description=f"Customer gives {_plain(amount)} USD, gets {result:.0f} LBP",
        )

    if currency == LBP:
        result = amount / rates.sell_rate
        _check_finite(amount, result, result * rates.spread)
        return Quote(
            input_currency=LBP,
            amount=amount,
            result=result,
            rate=rates.sell_rate,
            profit=result * rates.spread,
            from_currency="LBP",
            to_currency="USD",
            to_my_box=False,
            description=f"Customer gives {_plain(amount)} LBP, gets {result:.2f} USD",
        )

    raise InvalidCurrencyError(f"Unsupported input currency: {input_currency!r}")
