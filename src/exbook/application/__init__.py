# src/exbook/application/__init__.py
"""
Application Layer - Use Cases and Services

This package contains application services that orchestrate domain logic:
the exchange ledger and the daily auto-backup.
"""

from exbook.application.ledger import ExchangeLedger, now_ms
from exbook.application.backup import AutoBackup

__all__ = [
    "ExchangeLedger",
    "now_ms",
    "AutoBackup",
]
