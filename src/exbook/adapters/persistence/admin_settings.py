# src/exbook/adapters/persistence/admin_settings.py
"""
Admin Settings Feed - Globally Pushed Rates and Limits

The admin back-office writes its settings as one JSON object under
"@admin_settings". This feed reads that object, keeps a checksum of the
fields the ledger cares about (global buy/sell rate, free transaction limit)
and only hands settings to the caller when they changed.

Files that USE this module:
- exbook.app (ExchangeApp.tick polls the feed and applies changes)
- tests.test_admin_settings (unit tests)

Files that this module USES:
- exbook.adapters.persistence.kv_store (KeyValueStore protocol)
- exbook.domain.models (AdminSettings)
"""
from __future__ import annotations

import json
import logging
from numbers import Real
from typing import Any, Dict, Optional

from exbook.adapters.persistence.kv_store import KeyValueStore
from exbook.domain.models import AdminSettings

logger = logging.getLogger(__name__)

ADMIN_SETTINGS_KEY = "@admin_settings"


def _number(value: Any) -> Optional[float]:
    # Anything that is not a JSON number is treated as absent
    if isinstance(value, bool) or not isinstance(value, Real) or not value:
        return None
    return value


def settings_from_json(data: Dict[str, Any]) -> AdminSettings:
    """
    Extract the ledger-relevant fields from the admin settings object.

    Args:
        data: Parsed admin settings (other keys are ignored)

    Returns:
        AdminSettings with None for missing or non-numeric fields
    """
    limit = _number(data.get("freeTransactionLimit"))
    return AdminSettings(
        global_buy_rate=_number(data.get("globalBuyRate")),
        global_sell_rate=_number(data.get("globalSellRate")),
        free_transaction_limit=int(limit) if limit is not None else None,
    )


class AdminSettingsFeed:
    """Read admin-pushed settings and detect changes."""

    def __init__(self, store: KeyValueStore, key: str = ADMIN_SETTINGS_KEY):
        """
        Initialize the feed.

        Args:
            store: Key-value store shared with the admin back-office
            key: Storage key holding the admin settings JSON
        """
        self.store = store
        self.key = key
        self._checksum: Optional[str] = None

    def read(self) -> Optional[AdminSettings]:
        """
        Read current admin settings without change detection.

        Returns:
            AdminSettings, or None if nothing is stored or the value is unreadable
        """
        raw = self.store.get_item(self.key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Admin settings are not valid JSON: %s", e)
            return None
        if not isinstance(data, dict):
            logger.error("Admin settings must be a JSON object, got %s", type(data).__name__)
            return None
        return settings_from_json(data)

    @staticmethod
    def checksum(settings: AdminSettings) -> str:
        """Stable fingerprint of the fields the ledger applies."""
        return json.dumps(
            {
                "freeTransactionLimit": settings.free_transaction_limit,
                "globalBuyRate": settings.global_buy_rate,
                "globalSellRate": settings.global_sell_rate,
            },
            sort_keys=True,
        )

    def poll(self) -> Optional[AdminSettings]:
        """
        Return settings only when they differ from the last acknowledged ones.

        Polling does not mark settings as seen: the same settings are returned
        again until acknowledge() is called, so a failed apply is retried.

        Returns:
            AdminSettings if new or changed, None otherwise
        """
        current = self.read()
        if current is None:
            return None
        if self.checksum(current) == self._checksum:
            return None
        logger.info("Admin settings changed: %s", self.checksum(current))
        return current

    def acknowledge(self, settings: AdminSettings) -> None:
        """Mark settings as applied so later polls skip them."""
        self._checksum = self.checksum(settings)

    def publish(self, settings: AdminSettings) -> None:
        """
        Write admin settings (the back-office side of the feed).

        Keys not managed here are preserved.

        Args:
            settings: Settings to publish; None fields are left untouched
        """
        data: Dict[str, Any] = {}
        raw = self.store.get_item(self.key)
        if raw:
            try:
                loaded = json.loads(raw)
                if isinstance(loaded, dict):
                    data = loaded
            except json.JSONDecodeError:
                logger.warning("Overwriting unreadable admin settings")

        if settings.global_buy_rate is not None:
            data["globalBuyRate"] = settings.global_buy_rate
        if settings.global_sell_rate is not None:
            data["globalSellRate"] = settings.global_sell_rate
        if settings.free_transaction_limit is not None:
            data["freeTransactionLimit"] = settings.free_transaction_limit

        self.store.set_item(self.key, json.dumps(data))
        logger.info("Admin settings published")
