# src/exbook/application/ledger.py
"""
Exchange Ledger - Transaction Recording and Balance Reconciliation

This module owns the bookkeeping state of the exchange business: rates, vault
balances, My Box / His Box, transaction history and quota/premium flags.
The whole state is one immutable LedgerState; every operation builds the
next snapshot, persists it in a single write and only then swaps it in, so a
failed write leaves the in-memory ledger exactly as it was.

Files that USE this module:
- exbook.app (composition root creates and drives the ledger)
- exbook.application.backup (reads the snapshot for daily backups)
- tests.test_ledger (unit tests)

Files that this module USES:
- exbook.adapters.persistence.ledger_store (load_state, save_state)
- exbook.adapters.export.spreadsheet (write_workbook for reports)
- exbook.domain.exchange (quote calculation)
- exbook.domain.models (LedgerState and its parts)
- exbook.shared.validators (amount/rate/balance checks)
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from exbook.adapters.export.spreadsheet import report_filename, write_workbook
from exbook.adapters.persistence.kv_store import KeyValueStore
from exbook.adapters.persistence.ledger_store import load_state, save_state
from exbook.domain.errors import (
    InvalidAmountError,
    InvalidRateError,
    NothingToExportError,
    PersistenceError,
    PremiumRequiredError,
    QuotaExceededError,
)
from exbook.domain.exchange import quote
from exbook.domain.models import (
    DAY_MS,
    DEFAULT_FREE_LIMIT,
    AdminSettings,
    BoxBalances,
    ExchangeRates,
    LedgerState,
    PremiumStatus,
    QuotaState,
    Transaction,
    TransactionResult,
    VaultBalances,
)
from exbook.shared.validators import is_valid_amount, is_valid_balance, is_valid_rate

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


class ExchangeLedger:
    """Bookkeeping core for USD/LBP exchange transactions."""

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        free_limit: int = DEFAULT_FREE_LIMIT,
        clock: Callable[[], int] = now_ms,
        autosave: bool = True,
        state: Optional[LedgerState] = None,
    ):
        """
        Initialize the ledger with default balances.

        Args:
            store: Key-value store for the snapshot (None keeps the ledger in memory)
            free_limit: Free-tier transaction allowance until admin settings arrive
            clock: Returns the current time in epoch milliseconds
            autosave: Persist every mutation immediately; when False the caller
                commits with save()
            state: Initial snapshot (defaults to first-launch values)
        """
        self.store = store
        self.clock = clock
        self.autosave = autosave
        self._state = state or LedgerState(quota=QuotaState(free_limit=free_limit))
        self._dirty = False

    # ------------------------------------------------------------------ state

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def rates(self) -> ExchangeRates:
        return self._state.rates

    @property
    def vault(self) -> VaultBalances:
        return self._state.vault

    @property
    def boxes(self) -> BoxBalances:
        return self._state.boxes

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self._state.transactions

    @property
    def quota(self) -> QuotaState:
        return self._state.quota

    @property
    def total_profit(self) -> float:
        """Sum of profit over the whole history, in LBP."""
        return self._state.total_profit

    @property
    def is_dirty(self) -> bool:
        """True when in-memory changes have not been saved yet."""
        return self._dirty

    # ------------------------------------------------------------ persistence

    def _commit(self, new_state: LedgerState, action: str) -> LedgerState:
        """
        Persist new_state (when autosave is on) and make it current.

        Raises:
            PersistenceError: If the write fails; the previous state is kept
        """
        if self.autosave and self.store is not None:
            try:
                save_state(self.store, new_state)
            except PersistenceError:
                logger.error("Failed to persist ledger after %s, changes rolled back", action)
                raise
            except Exception as e:
                logger.error("Failed to persist ledger after %s, changes rolled back: %s", action, e)
                raise PersistenceError(f"Failed to persist ledger after {action}: {e}") from e
            self._dirty = False
        else:
            self._dirty = True

        self._state = new_state
        logger.debug("Ledger updated: %s", action)
        return new_state

    def save(self) -> None:
        """
        Write the current snapshot to the store.

        Raises:
            PersistenceError: If no store is configured or the write fails
        """
        if self.store is None:
            raise PersistenceError("No store configured for this ledger")
        try:
            save_state(self.store, self._state)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save ledger: {e}") from e
        self._dirty = False
        logger.info("Ledger saved (%d transactions)", len(self._state.transactions))

    def load(self) -> bool:
        """
        Replace the in-memory state with the stored snapshot, then check premium expiry.

        Returns:
            True if a stored snapshot was found, False if defaults are kept
        """
        if self.store is None:
            return False

        loaded = load_state(self.store, free_limit=self._state.quota.free_limit)
        if loaded is None:
            logger.info("No stored ledger found, starting with defaults")
            return False

        self._state = loaded
        self._dirty = False
        logger.info(
            "Loaded ledger: %d transactions, premium=%s",
            len(loaded.transactions),
            loaded.quota.is_premium,
        )
        try:
            self.check_premium_expiry()
        except PersistenceError as e:
            # State stays premium until the next check manages to persist
            logger.warning("Premium expiry check could not be persisted on load: %s", e)
        return True

    # ----------------------------------------------------------- transactions

    def record_transaction(self, input_currency: str, amount: float) -> TransactionResult:
        """
        Record a customer trade and update every balance together.

        Args:
            input_currency: "usd" (customer pays USD, gets LBP) or "lbp"
                (customer pays LBP, gets USD)
            amount: Quantity the customer pays, in input_currency

        Returns:
            TransactionResult with result, profit, box attribution and description

        Raises:
            InvalidAmountError: If amount is not a finite number greater than zero
            QuotaExceededError: If the free-tier allowance is used up; an expired
                subscription counts as free
            InvalidCurrencyError: If input_currency is not "usd" or "lbp"
            PersistenceError: If the snapshot cannot be written
        """
        if not is_valid_amount(amount):
            raise InvalidAmountError(f"Invalid amount: {amount!r}")

        self.check_premium_expiry()
        state = self._state
        quota = state.quota
        if quota.quota_reached:
            logger.info(
                "Transaction limit reached: %d/%d (premium=%s)",
                quota.transaction_count, quota.free_limit, quota.is_premium,
            )
            raise QuotaExceededError(quota.transaction_count, quota.free_limit)

        q = quote(input_currency, float(amount), state.rates)
        transaction = q.to_transaction(self.clock())

        lbp_delta, usd_delta = q.vault_delta
        if q.to_my_box:
            boxes = replace(state.boxes, my_box=state.boxes.my_box + q.box_increment)
        else:
            boxes = replace(state.boxes, his_box=state.boxes.his_box + q.box_increment)
        vault = VaultBalances(lbp=state.vault.lbp + lbp_delta, usd=state.vault.usd + usd_delta)
        if not all(math.isfinite(v) for v in (vault.lbp, vault.usd, boxes.my_box, boxes.his_box)):
            raise InvalidAmountError(f"Amount would overflow the balances: {amount!r}")

        self._commit(
            replace(
                state,
                transactions=state.transactions + (transaction,),
                quota=replace(quota, transaction_count=quota.transaction_count + 1),
                vault=vault,
                boxes=boxes,
            ),
            "transaction",
        )
        logger.info("%s | profit=%.2f LBP | my_box=%s", q.description, q.profit, q.to_my_box)

        return TransactionResult(
            result=q.result,
            profit=q.profit,
            to_my_box=q.to_my_box,
            description=q.description,
            transaction=transaction,
        )

    def clear_history(self) -> None:
        """Empty the history and reset the transaction counter; balances and rates stay."""
        state = self._state
        self._commit(
            replace(state, transactions=(), quota=replace(state.quota, transaction_count=0)),
            "clear history",
        )
        logger.info("Transaction history cleared")

    # ------------------------------------------------------ rates and balances

    def set_buy_rate(self, rate: float) -> None:
        if not is_valid_rate(rate):
            raise InvalidRateError(f"Invalid buy rate: {rate!r}")
        self._commit(replace(self._state, rates=replace(self._state.rates, buy_rate=float(rate))), "buy rate")

    def set_sell_rate(self, rate: float) -> None:
        if not is_valid_rate(rate):
            raise InvalidRateError(f"Invalid sell rate: {rate!r}")
        self._commit(replace(self._state, rates=replace(self._state.rates, sell_rate=float(rate))), "sell rate")

    def update_vault(self, lbp: float, usd: float) -> None:
        """
        Overwrite both vault balances.

        Raises:
            InvalidAmountError: If either balance is not a finite number >= 0
        """
        if not is_valid_balance(lbp):
            raise InvalidAmountError(f"Invalid LBP balance: {lbp!r}")
        if not is_valid_balance(usd):
            raise InvalidAmountError(f"Invalid USD balance: {usd!r}")
        self._commit(replace(self._state, vault=VaultBalances(lbp=float(lbp), usd=float(usd))), "vault update")

    def reset_rates(self) -> None:
        self._commit(replace(self._state, rates=ExchangeRates()), "reset rates")

    def reset_boxes(self) -> None:
        self._commit(replace(self._state, boxes=BoxBalances()), "reset boxes")
        logger.info("My Box and His Box reset to 0")

    def reset_balances(self) -> None:
        """Reset both boxes to 0 and the vault to its opening balances."""
        self._commit(replace(self._state, boxes=BoxBalances(), vault=VaultBalances()), "reset balances")
        logger.info("Boxes and vault reset to defaults")

    def apply_admin_settings(self, settings: AdminSettings) -> List[str]:
        """
        Apply admin-pushed rates and free limit, overriding local values.

        Invalid fields are skipped with a warning; the rest still apply.

        Args:
            settings: Settings from the admin feed

        Returns:
            Human-readable notes for the values that actually changed
        """
        state = self._state
        rates = state.rates
        quota = state.quota
        changes: List[str] = []

        limit = settings.free_transaction_limit
        if limit is not None:
            if isinstance(limit, int) and not isinstance(limit, bool) and limit >= 0:
                if limit != quota.free_limit:
                    changes.append(f"Transaction limit updated to {limit}.")
                quota = replace(quota, free_limit=limit)
            else:
                logger.warning("Ignoring invalid free transaction limit from admin: %r", limit)

        if settings.global_buy_rate is not None:
            if is_valid_rate(settings.global_buy_rate):
                if settings.global_buy_rate != rates.buy_rate:
                    changes.append(f"Buy rate updated to {settings.global_buy_rate:,.0f}.")
                rates = replace(rates, buy_rate=float(settings.global_buy_rate))
            else:
                logger.warning("Ignoring invalid global buy rate from admin: %r", settings.global_buy_rate)

        if settings.global_sell_rate is not None:
            if is_valid_rate(settings.global_sell_rate):
                if settings.global_sell_rate != rates.sell_rate:
                    changes.append(f"Sell rate updated to {settings.global_sell_rate:,.0f}.")
                rates = replace(rates, sell_rate=float(settings.global_sell_rate))
            else:
                logger.warning("Ignoring invalid global sell rate from admin: %r", settings.global_sell_rate)

        if changes:
            self._commit(replace(state, rates=rates, quota=quota), "admin settings")
            logger.info("Admin settings applied: %s", " ".join(changes))
        return changes

    # ---------------------------------------------------------------- premium

    def premium_status(self) -> PremiumStatus:
        return self._state.quota.status(self.clock())

    def activate_premium(self, duration_days: float = 30) -> int:
        """
        Grant premium for duration_days from now.

        Returns:
            New expiry in epoch milliseconds

        Raises:
            InvalidAmountError: If duration_days is not a positive number
        """
        if not is_valid_amount(duration_days):
            raise InvalidAmountError(f"Invalid premium duration: {duration_days!r}")
        expiry = self.clock() + int(duration_days * DAY_MS)
        self._commit(
            replace(self._state, quota=replace(self._state.quota, is_premium=True, premium_expiry=expiry)),
            "premium activation",
        )
        logger.info("Premium activated for %s days", duration_days)
        return expiry

    def deactivate_premium(self) -> None:
        self._commit(
            replace(self._state, quota=replace(self._state.quota, is_premium=False, premium_expiry=None)),
            "premium deactivation",
        )
        logger.info("Premium deactivated")

    def check_premium_expiry(self) -> bool:
        """
        Drop premium once its expiry has passed.

        The transaction counter and balances are left as they are, so the
        free-tier quota resumes from the current count.

        Returns:
            True if premium just expired, False otherwise
        """
        if self.premium_status() is not PremiumStatus.EXPIRED:
            return False
        self._commit(
            replace(self._state, quota=replace(self._state.quota, is_premium=False, premium_expiry=None)),
            "premium expiry",
        )
        logger.warning("Premium subscription expired, transaction limit is active again")
        return True

    def premium_days_left(self) -> Optional[int]:
        """Whole days (rounded up) until premium ends, None when not premium."""
        quota = self._state.quota
        if not quota.is_premium or quota.premium_expiry is None:
            return None
        return math.ceil((quota.premium_expiry - self.clock()) / DAY_MS)

    def premium_expiring_soon(self, warning_days: int = 3) -> bool:
        days_left = self.premium_days_left()
        return days_left is not None and 0 < days_left <= warning_days

    # ----------------------------------------------------------------- export

    def export_report(self, directory: Union[str, Path], filename: Optional[str] = None) -> Path:
        """
        Write the transaction report workbook.

        Args:
            directory: Folder to write into
            filename: Override for the default Exchange_Report_<date>.xlsx

        Returns:
            Path of the written workbook

        Raises:
            PremiumRequiredError: If premium is not active
            NothingToExportError: If the history is empty
        """
        self.check_premium_expiry()
        if not self._state.quota.is_premium:
            raise PremiumRequiredError("Excel export is available for Premium users only")
        if not self._state.transactions:
            raise NothingToExportError("No transactions to export")
        path = Path(directory) / (filename or report_filename(self.clock()))
        return write_workbook(self._state.transactions, path)
