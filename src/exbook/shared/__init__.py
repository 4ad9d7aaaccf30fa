# src/exbook/shared/__init__.py
"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation
- Logging configuration
"""

from exbook.shared.validators import (
    BACKUP_PREFERENCES,
    is_valid_amount,
    is_valid_balance,
    is_valid_rate,
    parse_number,
    validate_backup_preference,
)
from exbook.shared.logging_conf import setup_logging

__all__ = [
    "BACKUP_PREFERENCES",
    "is_valid_amount",
    "is_valid_balance",
    "is_valid_rate",
    "parse_number",
    "validate_backup_preference",
    "setup_logging",
]
