# src/exbook/adapters/export/spreadsheet.py
"""
Spreadsheet Export - Transaction Report Workbook

Builds the transaction report: one row per transaction in stored order, then
a TOTAL row carrying the summed profit. Rows are plain lists so they can be
checked without a workbook; write_workbook saves them as .xlsx via openpyxl.

Files that USE this module:
- exbook.application.ledger (ExchangeLedger.export_report)
- tests.test_spreadsheet (unit tests)

Files that this module USES:
- openpyxl (xlsx writing)
- exbook.domain.models (Transaction)
"""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from openpyxl import Workbook
from openpyxl.styles import Font

from exbook.domain.models import USD, Transaction

logger = logging.getLogger(__name__)

SHEET_TITLE = "Transactions"

COLUMNS = [
    "#",
    "Date",
    "Type",
    "Input Amount",
    "Input Currency",
    "Output Amount",
    "Output Currency",
    "Exchange Rate",
    "Profit (LBP)",
    "Box",
]


def _fmt_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def report_filename(now_ms: int) -> str:
    """File name of a report generated at now_ms, e.g. Exchange_Report_2026-10-19.xlsx."""
    return f"Exchange_Report_{datetime.fromtimestamp(now_ms / 1000).date().isoformat()}.xlsx"


def transaction_row(index: int, transaction: Transaction) -> List[Any]:
    """
    Build the report row for one transaction.

    Args:
        index: 1-based position in history
        transaction: Transaction to render

    Returns:
        Cell values in COLUMNS order
    """
    return [
        index,
        _fmt_timestamp(transaction.timestamp),
        "Customer gave USD" if transaction.input_currency == USD else "Customer gave LBP",
        transaction.amount,
        transaction.from_currency,
        round(transaction.result, 2),
        transaction.to_currency,
        transaction.rate,
        round(transaction.profit, 2),
        "My Box" if transaction.to_my_box else "His Box",
    ]


def build_rows(transactions: Sequence[Transaction]) -> List[List[Any]]:
    """
    Build all report rows (without the header).

    Returns:
        One row per transaction in stored order, followed by the TOTAL row
    """
    rows = [transaction_row(i, t) for i, t in enumerate(transactions, start=1)]
    total_profit = sum(t.profit for t in transactions)
    total_row: List[Any] = [""] * len(COLUMNS)
    total_row[COLUMNS.index("Date")] = "TOTAL"
    total_row[COLUMNS.index("Profit (LBP)")] = round(total_profit, 2)
    rows.append(total_row)
    return rows


def write_workbook(
    transactions: Sequence[Transaction],
    path: Union[str, Path],
    title: Optional[str] = None,
) -> Path:
    """
    Write the transaction report as an .xlsx workbook.

    Args:
        transactions: History to export
        path: Destination file
        title: Sheet title (default: "Transactions")

    Returns:
        Path of the written workbook
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = title or SHEET_TITLE
    ws.append(COLUMNS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    rows = build_rows(transactions)
    for row in rows:
        ws.append(row)
    ws.cell(row=ws.max_row, column=COLUMNS.index("Date") + 1).font = Font(bold=True)

    wb.save(path)
    logger.info("Exported %d transactions to %s", len(transactions), path)
    return path
