"""
Spreadsheet exporter (openpyxl).

Writes a title block, then for each section a heading and one sheet row
per ``ReportRow``: the label in column A indented by ``level``, the amount
in column B (blank for header rows), subtotals in bold.  A summary block
closes the sheet.
"""

from __future__ import annotations

import io
from decimal import Decimal

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

from ledger_kernel.exceptions import ExportError
from ledger_kernel.logging_config import get_logger
from ledger_modules.reporting.exporters.common import (
    INDENT_PER_LEVEL,
    export_filename,
    quantize,
    summary_label,
)
from ledger_modules.reporting.models import HierarchicalReport

logger = get_logger("modules.reporting.exporters.spreadsheet")

TITLE_FONT = Font(bold=True, size=14)
SECTION_FONT = Font(bold=True, size=12)
SUBTOTAL_FONT = Font(bold=True)


class SpreadsheetExporter:
    """Renders a report to ``.xlsx`` bytes."""

    def __init__(self, precision: int = 2):
        self.precision = precision
        self.currency_format = "#,##0" if precision == 0 else "#,##0." + "0" * precision

    def filename(self, report: HierarchicalReport) -> str:
        return export_filename(report, "xlsx")

    def export(self, report: HierarchicalReport) -> bytes:
        """
        Raises:
            ExportError: the workbook could not be produced.
        """
        try:
            content = self._render(report)
        except Exception as exc:
            raise ExportError("xlsx", str(exc)) from exc
        logger.info(
            "report_exported",
            extra={
                "format": "xlsx",
                "report_type": report.metadata.report_type.value,
                "byte_count": len(content),
            },
        )
        return content

    def _render(self, report: HierarchicalReport) -> bytes:
        meta = report.metadata
        wb = Workbook()
        ws = wb.active
        ws.title = meta.display_title[:31]

        ws["A1"] = meta.entity_name
        ws["A1"].font = TITLE_FONT
        ws["A2"] = meta.display_title
        ws["A3"] = meta.period_label
        ws["A4"] = f"Amounts in {meta.currency}"

        row = 6
        for section in report.report_sections:
            ws.cell(row=row, column=1, value=section.name).font = SECTION_FONT
            row += 1
            for report_row in section.rows:
                label = ws.cell(row=row, column=1, value=report_row.label)
                label.alignment = Alignment(indent=report_row.level * INDENT_PER_LEVEL)
                if report_row.amount is not None:
                    amount = ws.cell(
                        row=row, column=2,
                        value=quantize(report_row.amount, self.precision),
                    )
                    amount.number_format = self.currency_format
                    if report_row.is_subtotal:
                        amount.font = SUBTOTAL_FONT
                if report_row.is_subtotal:
                    label.font = SUBTOTAL_FONT
                row += 1
            row += 1

        summary = report.summary
        if summary:
            ws.cell(row=row, column=1, value="Summary").font = SECTION_FONT
            row += 1
            for key, value in summary.items():
                ws.cell(row=row, column=1, value=summary_label(key))
                cell = ws.cell(row=row, column=2, value=value)
                if isinstance(value, Decimal):
                    cell.value = quantize(value, self.precision)
                    cell.number_format = self.currency_format
                row += 1

        ws.column_dimensions["A"].width = 50
        ws.column_dimensions["B"].width = 20

        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
