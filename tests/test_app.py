"""
Composition Root Tests - Unit Tests for create_app and tick

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- exbook.app (create_app, ExchangeApp)
- exbook.config (Settings)
- exbook.domain.errors (PersistenceError, PremiumRequiredError)
- exbook.domain.models (AdminSettings)
"""
from unittest.mock import patch  # Simulate a failing ledger write

import pytest  # Testing framework for writing and running tests
from openpyxl import load_workbook  # Read exported workbooks back

from exbook.app import create_app  # Factory under test
from exbook.config import Settings  # Configuration model
from exbook.domain.errors import PersistenceError, PremiumRequiredError  # Failure modes
from exbook.domain.models import DAY_MS, AdminSettings  # Settings value object


@pytest.fixture
def cfg(tmp_path):
    return Settings(
        ledger_file=tmp_path / "ledger.json",
        backup_dir=tmp_path / "backups",
        export_dir=tmp_path / "exports",
        free_transaction_limit=3,
        backup_preference="file",
    )


class TestCreateApp:
    def test_fresh_install_uses_defaults(self, cfg, clock):
        app = create_app(cfg, clock=clock)

        assert app.ledger.vault.lbp == 500_000_000
        assert app.ledger.quota.free_limit == 3
        assert "Free: 0/3 transactions" in app.status()

    def test_ledger_survives_restart(self, cfg, clock):
        first = create_app(cfg, clock=clock)
        first.ledger.record_transaction("lbp", 50_000_000)

        second = create_app(cfg, clock=clock)

        assert second.ledger.state == first.ledger.state
        assert second.ledger.boxes.his_box == 50_000_000


class TestTick:
    def test_applies_admin_settings_once(self, cfg, clock):
        app = create_app(cfg, clock=clock)
        app.admin_feed.publish(AdminSettings(global_buy_rate=99000, free_transaction_limit=50))

        summary = app.tick()

        assert summary["admin_changes"] == [
            "Transaction limit updated to 50.",
            "Buy rate updated to 99,000.",
        ]
        assert app.ledger.rates.buy_rate == 99000
        assert app.tick()["admin_changes"] == []

    def test_expires_premium_and_backs_up(self, cfg, clock):
        app = create_app(cfg, clock=clock)
        app.ledger.activate_premium(2)
        app.ledger.record_transaction("usd", 10)

        summary = app.tick()
        assert summary["expiring_soon"] is True
        assert summary["backup"] is not None
        assert summary["backup"].exists()

        clock.advance(3 * DAY_MS)
        summary = app.tick()
        assert summary["premium_expired"] is True
        assert summary["backup"] is None
        assert app.ledger.quota.is_premium is False
        assert app.ledger.quota.transaction_count == 1

    def test_admin_settings_retried_after_failed_save(self, cfg, clock):
        app = create_app(cfg, clock=clock)
        app.admin_feed.publish(AdminSettings(global_buy_rate=90000, global_sell_rate=95000))

        with patch("exbook.application.ledger.save_state", side_effect=PersistenceError("disk full")):
            summary = app.tick()
        assert summary["admin_changes"] == []
        assert app.ledger.rates.buy_rate == 98000

        summary = app.tick()
        assert summary["admin_changes"] == [
            "Buy rate updated to 90,000.",
            "Sell rate updated to 95,000.",
        ]
        assert app.ledger.rates.buy_rate == 90000
        assert app.ledger.rates.sell_rate == 95000
        assert app.tick()["admin_changes"] == []


class TestExportReport:
    def test_writes_into_configured_export_dir(self, cfg, clock):
        app = create_app(cfg, clock=clock)
        app.ledger.activate_premium(30)
        app.ledger.record_transaction("usd", 500)

        path = app.export_report()

        assert path.parent == cfg.export_dir
        assert path.exists()
        rows = list(load_workbook(path).active.iter_rows(values_only=True))
        assert rows[-1][1] == "TOTAL"

    def test_requires_premium(self, cfg, clock):
        app = create_app(cfg, clock=clock)
        app.ledger.record_transaction("usd", 500)

        with pytest.raises(PremiumRequiredError):
            app.export_report()
        assert not cfg.export_dir.exists()
