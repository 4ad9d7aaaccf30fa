# src/exbook/application/backup.py
"""
Auto Backup - Daily Ledger Backup for Premium Users

Once per 24 hours, premium users with a non-empty history get a JSON copy of
their ledger (history, total profit, balances, rates) written to the backup
directory. The preference and the time of the last backup live in the
key-value store next to the ledger.

Files that USE this module:
- exbook.app (ExchangeApp.tick runs maybe_backup)
- tests.test_backup (unit tests)

Files that this module USES:
- exbook.adapters.persistence.kv_store (preference and last-run keys)
- exbook.adapters.persistence.ledger_store (transaction_to_json)
- exbook.application.ledger (ExchangeLedger)
- exbook.shared.validators (validate_backup_preference)
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from exbook.adapters.persistence.kv_store import KeyValueStore
from exbook.adapters.persistence.ledger_store import transaction_to_json
from exbook.application.ledger import ExchangeLedger
from exbook.domain.errors import PersistenceError
from exbook.domain.models import DAY_MS
from exbook.shared.validators import BACKUP_PREFERENCES, validate_backup_preference

logger = logging.getLogger(__name__)

PREFERENCE_KEY = "@exchange_auto_save_preference"
LAST_BACKUP_KEY = "@exchange_last_auto_save"


class AutoBackup:
    """Write at most one ledger backup per day."""

    def __init__(self, store: KeyValueStore, backup_dir: Union[str, Path], default_preference: str = "none"):
        """
        Initialize auto-backup.

        Args:
            store: Key-value store holding the preference and last backup time
            backup_dir: Folder receiving Exchange_Backup_<date>.json files
            default_preference: Preference used until one is stored
        """
        self.store = store
        self.backup_dir = Path(backup_dir)
        self.default_preference = default_preference

    @property
    def preference(self) -> str:
        stored = self.store.get_item(PREFERENCE_KEY)
        if stored and validate_backup_preference(stored):
            return stored
        return self.default_preference

    def set_preference(self, preference: str) -> None:
        if not validate_backup_preference(preference):
            raise ValueError(f"Backup preference must be one of {', '.join(BACKUP_PREFERENCES)}")
        self.store.set_item(PREFERENCE_KEY, preference)
        logger.info("Auto-backup preference set to %s", preference)

    @property
    def last_backup(self) -> int:
        """Epoch milliseconds of the last backup, 0 if none."""
        raw = self.store.get_item(LAST_BACKUP_KEY)
        try:
            return int(raw) if raw else 0
        except ValueError:
            logger.warning("Ignoring unreadable last backup time: %r", raw)
            return 0

    def is_due(self, ledger: ExchangeLedger) -> bool:
        if self.preference == "none":
            return False
        if not ledger.quota.is_premium or not ledger.transactions:
            return False
        return self.last_backup <= ledger.clock() - DAY_MS

    def maybe_backup(self, ledger: ExchangeLedger) -> Optional[Path]:
        """
        Write a backup if one is due.

        Returns:
            Path of the written backup, or None when no backup was due

        Raises:
            PersistenceError: If the backup file or the last-run time cannot be written
        """
        if not self.is_due(ledger):
            return None

        now = ledger.clock()
        state = ledger.state
        payload = {
            "timestamp": now,
            "transactions": [transaction_to_json(t) for t in state.transactions],
            "totalProfit": state.total_profit,
            "myBalance": state.boxes.my_box,
            "hisBalance": state.boxes.his_box,
            "lbpBalance": state.vault.lbp,
            "usdBalance": state.vault.usd,
            "buyRate": state.rates.buy_rate,
            "sellRate": state.rates.sell_rate,
        }

        day = datetime.fromtimestamp(now / 1000).date().isoformat()
        path = self.backup_dir / f"Exchange_Backup_{day}.json"
        self._write(path, payload)
        self.store.set_item(LAST_BACKUP_KEY, str(now))
        logger.info("Auto-backup saved: %s", path)
        return path

    def _write(self, path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(suffix=".json.tmp", dir=str(path.parent), text=True)
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(temp_path, str(path))
        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            logger.error("Auto-backup failed: %s", e)
            raise PersistenceError(f"Failed to write backup {path}: {e}") from e
