# src/exbook/adapters/persistence/__init__.py
"""
Persistence Adapters - Data Storage

This package contains adapters for persisting data:
- String-keyed stores (JSON file, in-memory)
- Ledger snapshot serialization
- Admin settings feed
"""

from exbook.adapters.persistence.kv_store import JsonFileStore, KeyValueStore, MemoryStore
from exbook.adapters.persistence.ledger_store import load_state, save_state
from exbook.adapters.persistence.admin_settings import AdminSettingsFeed

__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "load_state",
    "save_state",
    "AdminSettingsFeed",
]
