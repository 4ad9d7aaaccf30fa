# src/exbook/adapters/persistence/ledger_store.py
"""
Ledger Store - Ledger Snapshot Persistence

Serializes the complete LedgerState (rates, vault, boxes, history, quota) to
JSON and stores it under a single key, so one write commits every effect of a
transaction together.

Older installations kept each field under its own string key. When no
snapshot exists yet, load_state reads those keys instead so the data carries
over; the next save writes the single snapshot.

Files that USE this module:
- exbook.application.ledger (ExchangeLedger.save/load)
- tests.test_persistence (unit tests)

Files that this module USES:
- exbook.adapters.persistence.kv_store (KeyValueStore protocol)
- exbook.domain.models (LedgerState and its parts)
- exbook.shared.validators (parse_number for string-valued legacy keys)
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from exbook.adapters.persistence.kv_store import KeyValueStore
from exbook.domain.errors import PersistenceError
from exbook.domain.models import (
    DEFAULT_BUY_RATE,
    DEFAULT_FREE_LIMIT,
    DEFAULT_LBP_BALANCE,
    DEFAULT_SELL_RATE,
    DEFAULT_USD_BALANCE,
    BoxBalances,
    ExchangeRates,
    LedgerState,
    QuotaState,
    Transaction,
    VaultBalances,
)
from exbook.shared.validators import parse_number

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "@exchange_ledger"
SNAPSHOT_VERSION = 1

LEGACY_KEYS = {
    "buy_rate": "@exchange_buy_rate",
    "sell_rate": "@exchange_sell_rate",
    "transactions": "@exchange_transactions",
    "my_box": "@exchange_my_balance",
    "his_box": "@exchange_his_balance",
    "lbp": "@exchange_lbp_balance",
    "usd": "@exchange_usd_balance",
    "is_premium": "@exchange_premium_status",
    "premium_expiry": "@exchange_premium_expiry",
    "transaction_count": "@exchange_transaction_count",
}

# Legacy history entries use camelCase field names
_CAMEL_FIELDS = {
    "inputCurrency": "input_currency",
    "fromCurrency": "from_currency",
    "toCurrency": "to_currency",
    "toMyBox": "to_my_box",
}


def transaction_to_json(transaction: Transaction) -> Dict[str, Any]:
    return asdict(transaction)


def transaction_from_json(data: Dict[str, Any]) -> Transaction:
    """
    Build a Transaction from a stored dict (snake_case or legacy camelCase).

    Raises:
        KeyError, ValueError, TypeError: If a field is missing or malformed
    """
    normalized = {_CAMEL_FIELDS.get(k, k): v for k, v in data.items()}
    return Transaction(
        input_currency=str(normalized["input_currency"]),
        amount=float(normalized["amount"]),
        result=float(normalized["result"]),
        rate=float(normalized["rate"]),
        from_currency=str(normalized["from_currency"]),
        to_currency=str(normalized["to_currency"]),
        to_my_box=bool(normalized["to_my_box"]),
        profit=float(normalized["profit"]),
        timestamp=int(normalized["timestamp"]),
    )


def state_to_json(state: LedgerState) -> Dict[str, Any]:
    """
    Convert LedgerState to a JSON-serializable dictionary.

    Returns:
        Dictionary with a version tag and one entry per ledger section
    """
    return {
        "version": SNAPSHOT_VERSION,
        "rates": asdict(state.rates),
        "vault": asdict(state.vault),
        "boxes": asdict(state.boxes),
        "transactions": [transaction_to_json(t) for t in state.transactions],
        "quota": asdict(state.quota),
    }


def state_from_json(data: Dict[str, Any]) -> LedgerState:
    """
    Create LedgerState from a snapshot dictionary.

    Sections missing from the snapshot take their defaults.

    Raises:
        KeyError, ValueError, TypeError: If a present section is malformed
    """
    rates = data.get("rates") or {}
    vault = data.get("vault") or {}
    boxes = data.get("boxes") or {}
    quota = data.get("quota") or {}
    expiry = quota.get("premium_expiry")

    return LedgerState(
        rates=ExchangeRates(
            buy_rate=float(rates.get("buy_rate", DEFAULT_BUY_RATE)),
            sell_rate=float(rates.get("sell_rate", DEFAULT_SELL_RATE)),
        ),
        vault=VaultBalances(
            lbp=float(vault.get("lbp", DEFAULT_LBP_BALANCE)),
            usd=float(vault.get("usd", DEFAULT_USD_BALANCE)),
        ),
        boxes=BoxBalances(
            my_box=float(boxes.get("my_box", 0.0)),
            his_box=float(boxes.get("his_box", 0.0)),
        ),
        transactions=tuple(transaction_from_json(t) for t in data.get("transactions") or []),
        quota=QuotaState(
            transaction_count=int(quota.get("transaction_count", 0)),
            free_limit=int(quota.get("free_limit", DEFAULT_FREE_LIMIT)),
            is_premium=bool(quota.get("is_premium", False)),
            premium_expiry=int(expiry) if expiry is not None else None,
        ),
    )


def save_state(store: KeyValueStore, state: LedgerState) -> None:
    """
    Save the full ledger snapshot in one write.

    Args:
        store: Target key-value store
        state: Snapshot to persist

    Raises:
        PersistenceError: Propagated from the store when the write fails
    """
    store.set_item(SNAPSHOT_KEY, json.dumps(state_to_json(state), ensure_ascii=False))
    # The snapshot supersedes any per-field keys left by older versions
    for key in LEGACY_KEYS.values():
        if store.get_item(key) is None:
            continue
        try:
            store.remove_item(key)
        except PersistenceError as e:
            logger.warning("Could not remove legacy key %s: %s", key, e)


def _load_legacy(store: KeyValueStore, free_limit: int) -> Optional[LedgerState]:
    """Assemble a LedgerState from the per-field keys of older versions."""
    raw = {name: store.get_item(key) for name, key in LEGACY_KEYS.items()}
    if all(v is None for v in raw.values()):
        return None

    def number(name: str, default: float) -> float:
        parsed = parse_number(raw[name])
        return default if parsed is None else parsed

    transactions = ()
    if raw["transactions"]:
        try:
            transactions = tuple(transaction_from_json(t) for t in json.loads(raw["transactions"]))
        except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
            logger.warning("Legacy transaction history unreadable, starting empty: %s", e)

    # History length first, explicit counter wins when present
    count = len(transactions)
    stored_count = parse_number(raw["transaction_count"])
    if stored_count is not None:
        count = int(stored_count)

    is_premium = False
    if raw["is_premium"]:
        try:
            is_premium = bool(json.loads(raw["is_premium"]))
        except json.JSONDecodeError:
            is_premium = raw["is_premium"].strip().lower() == "true"

    expiry = parse_number(raw["premium_expiry"])

    logger.info("Migrating ledger from legacy per-field keys (%d transactions)", len(transactions))
    return LedgerState(
        rates=ExchangeRates(
            buy_rate=number("buy_rate", DEFAULT_BUY_RATE),
            sell_rate=number("sell_rate", DEFAULT_SELL_RATE),
        ),
        vault=VaultBalances(
            lbp=number("lbp", DEFAULT_LBP_BALANCE),
            usd=number("usd", DEFAULT_USD_BALANCE),
        ),
        boxes=BoxBalances(my_box=number("my_box", 0.0), his_box=number("his_box", 0.0)),
        transactions=transactions,
        quota=QuotaState(
            transaction_count=count,
            free_limit=free_limit,
            is_premium=is_premium,
            premium_expiry=int(expiry) if expiry is not None else None,
        ),
    )


def load_state(store: KeyValueStore, free_limit: int = DEFAULT_FREE_LIMIT) -> Optional[LedgerState]:
    """
    Load the ledger snapshot.

    Args:
        store: Source key-value store
        free_limit: Free-tier allowance to use when migrating legacy keys

    Returns:
        LedgerState if a snapshot (or legacy data) exists and is readable, None otherwise
    """
    raw = store.get_item(SNAPSHOT_KEY)
    if raw is None:
        return _load_legacy(store, free_limit)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Ledger snapshot is not valid JSON, ignoring it: %s", e)
        return None

    try:
        return state_from_json(data)
    except (AttributeError, KeyError, ValueError, TypeError) as e:
        logger.error("Ledger snapshot schema mismatch, ignoring it: %s", e)
        return None
