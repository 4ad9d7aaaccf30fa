# src/exbook/__init__.py
"""
ExBook - Currency Exchange Bookkeeping Ledger

Bookkeeping core for a USD/LBP money-changer: converts customer payments at
the configured buy/sell rates, tracks profit from the spread, and keeps the
vault and My Box / His Box balances reconciled with transaction history.
"""

__version__ = "1.0.0"
