# src/exbook/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions that represent
business rule violations and domain errors. Every validation error is
raised before the ledger mutates any state.
"""


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class InvalidAmountError(DomainError):
    """Raised when an amount or balance is non-numeric, non-finite, or out of range."""
    pass


class InvalidRateError(DomainError):
    """Raised when a rate value is invalid (e.g., negative or zero)."""
    pass


class InvalidCurrencyError(DomainError):
    """Raised when the input currency is neither USD nor LBP."""
    pass


class QuotaExceededError(DomainError):
    """Raised when a free-tier user has used up the transaction allowance."""

    def __init__(self, transaction_count: int, free_limit: int):
        super().__init__(
            f"Free users are limited to {free_limit} transactions "
            f"({transaction_count} recorded)"
        )
        self.transaction_count = transaction_count
        self.free_limit = free_limit


class PremiumRequiredError(DomainError):
    """Raised when a premium-only feature is used on the free tier."""
    pass


class NothingToExportError(DomainError):
    """Raised when an export is requested with an empty history."""
    pass


class PersistenceError(DomainError):
    """Raised when the ledger snapshot cannot be written to storage."""
    pass
