# src/exbook/shared/validators.py
"""
Input Validation Utilities - Numeric and Settings Validation

This module provides validation functions for amounts, rates and balances
entered by the user or pushed by the admin, plus parsing of the string
values found in legacy storage keys.

Files that USE this module:
- exbook.application.ledger (amount/rate/balance checks before mutation)
- exbook.adapters.persistence.ledger_store (parse_number for legacy keys)
- exbook.config.settings (validate_backup_preference)

Files that this module USES:
- None (pure utility functions)
"""
import math
from numbers import Real
from typing import Any, Optional

BACKUP_PREFERENCES = ("file", "none")


def _finite_number(value: Any) -> bool:
    # bool is a subclass of int; a checkbox value is never an amount
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def is_valid_amount(value: Any) -> bool:
    """
    Check a transaction amount.

    Args:
        value: Amount to validate

    Returns:
        True if value is a finite number greater than zero
    """
    return _finite_number(value) and value > 0


def is_valid_rate(value: Any) -> bool:
    """
    Check an exchange rate.

    Args:
        value: Rate to validate

    Returns:
        True if value is a finite number greater than zero
    """
    return _finite_number(value) and value > 0


def is_valid_balance(value: Any) -> bool:
    """
    Check a manually entered vault balance.

    Args:
        value: Balance to validate

    Returns:
        True if value is a finite number, zero or greater
    """
    return _finite_number(value) and value >= 0


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a stored or typed number, tolerating thousands separators.

    Args:
        value: String such as '98000', '500,000,000' or '12.5' (numbers pass through)

    Returns:
        Float value, or None if the input is empty or not numeric
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Real):
        return float(value)

    text = str(value).replace(",", "").strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def validate_backup_preference(preference: str) -> bool:
    """
    Validate auto-backup preference.

    Args:
        preference: Preference to validate

    Returns:
        True if preference is one of BACKUP_PREFERENCES
    """
    return preference in BACKUP_PREFERENCES
