"""
PDF exporter (reportlab platypus).

Same rows, same order as the spreadsheet: each section is a two-column
table with the label indented by ``level`` and subtotal lines in bold
with a rule above.
"""

from __future__ import annotations

import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ledger_kernel.exceptions import ExportError
from ledger_kernel.logging_config import get_logger
from ledger_modules.reporting.exporters.common import (
    export_filename,
    format_amount,
    format_summary_value,
    summary_label,
)
from ledger_modules.reporting.models import HierarchicalReport, ReportSection

logger = get_logger("modules.reporting.exporters.pdf")

BASE_PADDING = 6
PADDING_PER_LEVEL = 12
COLUMN_WIDTHS = (4.9 * inch, 2.0 * inch)


class PdfExporter:
    """Renders a report to PDF bytes."""

    def __init__(self, precision: int = 2):
        self.precision = precision
        self.styles = getSampleStyleSheet()
        self.styles.add(ParagraphStyle(
            name="ReportTitle",
            parent=self.styles["Heading1"],
            fontSize=16,
            alignment=TA_CENTER,
            spaceAfter=6,
        ))
        self.styles.add(ParagraphStyle(
            name="ReportSubtitle",
            parent=self.styles["Heading2"],
            fontSize=11,
            alignment=TA_CENTER,
            spaceAfter=4,
            textColor=colors.HexColor("#4a5568"),
        ))
        self.styles.add(ParagraphStyle(
            name="SectionHeader",
            parent=self.styles["Heading3"],
            fontName="Helvetica-Bold",
            spaceBefore=12,
            spaceAfter=4,
        ))

    def filename(self, report: HierarchicalReport) -> str:
        return export_filename(report, "pdf")

    def export(self, report: HierarchicalReport) -> bytes:
        """
        Raises:
            ExportError: the document could not be produced.
        """
        try:
            content = self._render(report)
        except Exception as exc:
            raise ExportError("pdf", str(exc)) from exc
        logger.info(
            "report_exported",
            extra={
                "format": "pdf",
                "report_type": report.metadata.report_type.value,
                "byte_count": len(content),
            },
        )
        return content

    def section_table(self, section: ReportSection) -> Table:
        data = [
            [row.label, format_amount(row.amount, self.precision)]
            for row in section.rows
        ]
        commands = [
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ]
        for index, row in enumerate(section.rows):
            commands.append((
                "LEFTPADDING", (0, index), (0, index),
                BASE_PADDING + PADDING_PER_LEVEL * row.level,
            ))
            if row.is_subtotal:
                commands.append(("FONTNAME", (0, index), (-1, index), "Helvetica-Bold"))
                commands.append(("LINEABOVE", (1, index), (1, index), 0.5, colors.black))
        table = Table(data, colWidths=COLUMN_WIDTHS)
        table.setStyle(TableStyle(commands))
        return table

    def _render(self, report: HierarchicalReport) -> bytes:
        meta = report.metadata
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=0.5 * inch,
            leftMargin=0.5 * inch,
            topMargin=0.5 * inch,
            bottomMargin=0.5 * inch,
            title=meta.display_title,
        )

        elements = [
            Paragraph(escape(meta.entity_name), self.styles["ReportTitle"]),
            Paragraph(escape(meta.display_title), self.styles["ReportSubtitle"]),
        ]
        if meta.period_label:
            elements.append(Paragraph(escape(meta.period_label), self.styles["ReportSubtitle"]))
        elements.append(Spacer(1, 12))

        for section in report.report_sections:
            elements.append(Paragraph(escape(section.name), self.styles["SectionHeader"]))
            elements.append(self.section_table(section))

        summary = report.summary
        if summary:
            elements.append(Paragraph("Summary", self.styles["SectionHeader"]))
            summary_table = Table(
                [
                    [summary_label(key), format_summary_value(value, self.precision)]
                    for key, value in summary.items()
                ],
                colWidths=COLUMN_WIDTHS,
            )
            summary_table.setStyle(TableStyle([
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ]))
            elements.append(summary_table)

        doc.build(elements)
        return buffer.getvalue()
