# src/exbook/adapters/formatting/formatter.py
"""
Message Formatter - Text Formatting and Presentation

This module renders ledger data as plain text for the host application:
transaction receipts, the balances summary and the quota/premium status line.

Files that USE this module:
- exbook.app (status summary logged after each housekeeping tick)
- tests.test_formatter (unit tests)

Files that this module USES:
- exbook.domain.models (LedgerState, QuotaState, TransactionResult)
"""
from __future__ import annotations

import math
from datetime import datetime

from exbook.domain.models import DAY_MS, LedgerState, PremiumStatus, QuotaState, TransactionResult


def format_lbp(value: float) -> str:
    """Format an LBP amount with thousands separators and no decimals."""
    return f"{value:,.0f} LBP"


def format_usd(value: float) -> str:
    """Format a USD amount with two decimals."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def _fmt_profit(value: float) -> str:
    prefix = "+" if value >= 0 else ""
    return f"{prefix}{value:,.2f} LBP"


def format_receipt(outcome: TransactionResult) -> str:
    """
    Format the confirmation shown after a transaction is recorded.

    Args:
        outcome: Result returned by ExchangeLedger.record_transaction

    Returns:
        Description, profit and the box the principal went to
    """
    box = "My Box" if outcome.to_my_box else "His Box"
    return (
        f"{outcome.description}\n"
        f"\n"
        f"Profit: {outcome.profit:.2f} LBP\n"
        f"Added to {box}"
    )


def format_quota_status(quota: QuotaState, now: int) -> str:
    """
    Format the subscription line.

    Args:
        quota: Current quota state
        now: Current time in epoch milliseconds

    Returns:
        "Premium until ..." or "Free: used/limit transactions"
    """
    status = quota.status(now)
    if status is PremiumStatus.PREMIUM:
        if quota.premium_expiry is None:
            return "Premium"
        days_left = math.ceil((quota.premium_expiry - now) / DAY_MS)
        until = datetime.fromtimestamp(quota.premium_expiry / 1000).date().isoformat()
        return f"Premium until {until} ({days_left} day{'s' if days_left != 1 else ''} left)"
    if status is PremiumStatus.EXPIRED:
        return "Premium expired"
    return f"Free: {quota.transaction_count}/{quota.free_limit} transactions"


def format_ledger_summary(state: LedgerState, now: int) -> str:
    """
    Format rates, balances, profit and quota as a multi-line summary.

    Args:
        state: Ledger snapshot
        now: Current time in epoch milliseconds
    """
    lines = [
        f"Buy rate: {state.rates.buy_rate:,.0f} | Sell rate: {state.rates.sell_rate:,.0f}",
        f"Vault: {format_lbp(state.vault.lbp)} | {format_usd(state.vault.usd)}",
        f"My Box: {format_lbp(state.boxes.my_box)} | His Box: {format_lbp(state.boxes.his_box)}",
        f"Total Profit: {_fmt_profit(state.total_profit)} ({len(state.transactions)} transactions)",
        format_quota_status(state.quota, now),
    ]
    return "\n".join(lines)
