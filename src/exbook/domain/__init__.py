# src/exbook/domain/__init__.py
"""
Domain Layer - Pure Business Objects

This package contains domain models, the quote calculation and business rules.
No dependencies on infrastructure or external systems.
"""

from exbook.domain.models import (
    AdminSettings,
    BoxBalances,
    ExchangeRates,
    LedgerState,
    PremiumStatus,
    QuotaState,
    Transaction,
    TransactionResult,
    VaultBalances,
)
from exbook.domain.exchange import Quote, quote
from exbook.domain.errors import (
    DomainError,
    InvalidAmountError,
    InvalidCurrencyError,
    InvalidRateError,
    NothingToExportError,
    PersistenceError,
    PremiumRequiredError,
    QuotaExceededError,
)

__all__ = [
    "AdminSettings",
    "BoxBalances",
    "ExchangeRates",
    "LedgerState",
    "PremiumStatus",
    "QuotaState",
    "Transaction",
    "TransactionResult",
    "VaultBalances",
    "Quote",
    "quote",
    "DomainError",
    "InvalidAmountError",
    "InvalidCurrencyError",
    "InvalidRateError",
    "NothingToExportError",
    "PersistenceError",
    "PremiumRequiredError",
    "QuotaExceededError",
]
