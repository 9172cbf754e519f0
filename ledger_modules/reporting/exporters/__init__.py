"""Renderers that consume report rows: spreadsheet, PDF, print HTML."""

from ledger_modules.reporting.exporters.common import export_filename, format_amount
from ledger_modules.reporting.exporters.pdf import PdfExporter
from ledger_modules.reporting.exporters.print_html import render_print_html
from ledger_modules.reporting.exporters.spreadsheet import SpreadsheetExporter

__all__ = [
    "PdfExporter",
    "SpreadsheetExporter",
    "export_filename",
    "format_amount",
    "render_print_html",
]
