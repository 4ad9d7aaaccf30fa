"""
Auto Backup Tests - Unit Tests for Daily Ledger Backups

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- exbook.application.backup (AutoBackup)
- exbook.application.ledger (ExchangeLedger, via the ledger fixture)
"""
import json  # Read backup files

import pytest  # Testing framework for writing and running tests

from unittest.mock import patch  # Simulate write failures

from exbook.application.backup import LAST_BACKUP_KEY, AutoBackup  # Service under test
from exbook.domain.errors import PersistenceError  # Raised on failed writes
from exbook.domain.models import DAY_MS  # One day in milliseconds


@pytest.fixture
def premium_ledger(ledger):
    ledger.activate_premium(30)
    ledger.record_transaction("usd", 500)
    return ledger


class TestPreference:
    def test_default_and_stored(self, store, tmp_path):
        backup = AutoBackup(store, tmp_path, default_preference="none")
        assert backup.preference == "none"

        backup.set_preference("file")
        assert backup.preference == "file"

    def test_rejects_unknown_preference(self, store, tmp_path):
        with pytest.raises(ValueError):
            AutoBackup(store, tmp_path).set_preference("email")


class TestMaybeBackup:
    def test_disabled_preference(self, store, premium_ledger, tmp_path):
        assert AutoBackup(store, tmp_path).maybe_backup(premium_ledger) is None

    def test_writes_backup(self, store, premium_ledger, clock, tmp_path):
        backup = AutoBackup(store, tmp_path, default_preference="file")

        path = backup.maybe_backup(premium_ledger)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert path.name.startswith("Exchange_Backup_")
        assert data["timestamp"] == clock.now
        assert data["totalProfit"] == 1_000_000
        assert data["myBalance"] == 49_000_000
        assert data["usdBalance"] == 7_000
        assert len(data["transactions"]) == 1
        assert store.get_item(LAST_BACKUP_KEY) == str(clock.now)

    def test_once_per_day(self, store, premium_ledger, clock, tmp_path):
        backup = AutoBackup(store, tmp_path, default_preference="file")
        backup.maybe_backup(premium_ledger)

        clock.advance(DAY_MS - 1)
        assert backup.maybe_backup(premium_ledger) is None

        clock.advance(1)
        assert backup.maybe_backup(premium_ledger) is not None

    def test_free_tier_is_skipped(self, store, ledger, tmp_path):
        ledger.record_transaction("usd", 1)
        assert AutoBackup(store, tmp_path, default_preference="file").maybe_backup(ledger) is None

    def test_empty_history_is_skipped(self, store, ledger, tmp_path):
        ledger.activate_premium(30)
        assert AutoBackup(store, tmp_path, default_preference="file").maybe_backup(ledger) is None

    def test_write_failure(self, store, premium_ledger, tmp_path):
        backup = AutoBackup(store, tmp_path, default_preference="file")

        with patch("exbook.application.backup.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError):
                backup.maybe_backup(premium_ledger)

        assert store.get_item(LAST_BACKUP_KEY) is None
