# src/exbook/adapters/__init__.py
"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Persistence (storage, admin settings feed)
- Export (spreadsheet reports)
- Formatting (output)
"""

__all__ = []
