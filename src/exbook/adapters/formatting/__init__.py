# src/exbook/adapters/formatting/__init__.py
"""
Formatting Adapters - Output Formatting

This package contains formatters for receipts and ledger summaries.
"""

from exbook.adapters.formatting.formatter import (
    format_lbp,
    format_ledger_summary,
    format_quota_status,
    format_receipt,
    format_usd,
)

__all__ = [
    "format_lbp",
    "format_ledger_summary",
    "format_quota_status",
    "format_receipt",
    "format_usd",
]
