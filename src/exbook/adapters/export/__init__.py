# src/exbook/adapters/export/__init__.py
"""
Export Adapters - Transaction Reports

This package contains exporters that render transaction history for
spreadsheet tools.
"""

from exbook.adapters.export.spreadsheet import COLUMNS, build_rows, report_filename, write_workbook

__all__ = ["COLUMNS", "build_rows", "report_filename", "write_workbook"]
