# src/exbook/app.py
"""
Application Composition Root - Wiring and Housekeeping

This module wires settings, storage, the ledger, the admin settings feed and
auto-backup into one ExchangeApp owned by the host application. Nothing here
schedules itself: the host calls tick() whenever it wants the periodic work
(premium expiry, admin settings sync, auto-backup) done.

Files that USE this module:
- Host applications embedding the ledger
- tests.test_app (unit tests)

Files that this module USES:
- exbook.config (Settings)
- exbook.shared.logging_conf (setup_logging)
- exbook.adapters.persistence (JsonFileStore, AdminSettingsFeed)
- exbook.adapters.formatting.formatter (format_ledger_summary)
- exbook.application (ExchangeLedger, AutoBackup)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from exbook.adapters.formatting.formatter import format_ledger_summary
from exbook.adapters.persistence.admin_settings import AdminSettingsFeed
from exbook.adapters.persistence.kv_store import JsonFileStore, KeyValueStore
from exbook.application.backup import AutoBackup
from exbook.application.ledger import ExchangeLedger, now_ms
from exbook.config import Settings
from exbook.domain.errors import PersistenceError
from exbook.shared.logging_conf import setup_logging

logger = logging.getLogger(__name__)


class ExchangeApp:
    """Ledger plus the collaborators that feed it."""

    def __init__(
        self,
        ledger: ExchangeLedger,
        admin_feed: AdminSettingsFeed,
        backup: AutoBackup,
        warning_days: int = 3,
        export_dir: Union[str, Path] = Path("./data/exports"),
    ):
        self.ledger = ledger
        self.admin_feed = admin_feed
        self.backup = backup
        self.warning_days = warning_days
        self.export_dir = Path(export_dir)

    def tick(self) -> Dict[str, Any]:
        """
        Run one round of periodic work.

        Each step is independent: a failing write in one is logged and the
        remaining steps still run.

        Returns:
            Summary with keys premium_expired, expiring_soon, admin_changes, backup
        """
        summary: Dict[str, Any] = {
            "premium_expired": False,
            "expiring_soon": False,
            "admin_changes": [],
            "backup": None,
        }

        try:
            summary["premium_expired"] = self.ledger.check_premium_expiry()
        except PersistenceError as e:
            logger.error("Premium expiry check failed: %s", e)
        summary["expiring_soon"] = self.ledger.premium_expiring_soon(self.warning_days)
        if summary["expiring_soon"]:
            logger.warning("Premium expires in %s day(s)", self.ledger.premium_days_left())

        settings = self.admin_feed.poll()
        if settings is not None:
            try:
                summary["admin_changes"] = self.ledger.apply_admin_settings(settings)
            except PersistenceError as e:
                # Left unacknowledged so the next tick retries
                logger.error("Applying admin settings failed: %s", e)
            else:
                self.admin_feed.acknowledge(settings)

        try:
            summary["backup"] = self.backup.maybe_backup(self.ledger)
        except PersistenceError as e:
            logger.error("Auto-backup failed: %s", e)

        return summary

    def status(self) -> str:
        return format_ledger_summary(self.ledger.state, self.ledger.clock())

    def export_report(self, filename: Optional[str] = None) -> Path:
        """Write the transaction report into the configured export directory."""
        path = self.ledger.export_report(self.export_dir, filename)
        logger.info("Report exported to %s", path)
        return path


def create_app(
    cfg: Optional[Settings] = None,
    clock: Callable[[], int] = now_ms,
    store: Optional[KeyValueStore] = None,
    configure_logging: bool = False,
) -> ExchangeApp:
    """
    Build an ExchangeApp from settings and load the stored ledger.

    Args:
        cfg: Settings (defaults to a fresh Settings() from the environment)
        clock: Returns the current time in epoch milliseconds
        store: Key-value store override (defaults to JsonFileStore(cfg.ledger_file))
        configure_logging: Call setup_logging with the configured options

    Returns:
        Ready-to-use ExchangeApp
    """
    cfg = cfg or Settings()
    if configure_logging:
        setup_logging(
            level=cfg.log_level,
            log_file=cfg.log_file,
            log_dir=cfg.log_dir,
            log_to_stdout=cfg.log_stdout,
            max_bytes=cfg.log_max_bytes,
            backup_count=cfg.log_backup_count,
        )

    store = store if store is not None else JsonFileStore(cfg.ledger_file)
    ledger = ExchangeLedger(store=store, free_limit=cfg.free_transaction_limit, clock=clock)
    ledger.load()

    app = ExchangeApp(
        ledger=ledger,
        admin_feed=AdminSettingsFeed(store),
        backup=AutoBackup(store, cfg.backup_dir, default_preference=cfg.backup_preference),
        warning_days=cfg.premium_warning_days,
        export_dir=cfg.export_dir,
    )
    logger.info("Exchange ledger ready\n%s", app.status())
    return app
