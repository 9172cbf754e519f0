"""
Print layout (jinja2).

Renders the HTML page the browser print pipeline turns into paper or PDF.
Rows come straight from the report sections; indentation is a CSS
padding derived from ``level``.
"""

from __future__ import annotations

from jinja2 import BaseLoader, Environment, select_autoescape

from ledger_kernel.exceptions import ExportError
from ledger_kernel.logging_config import get_logger
from ledger_modules.reporting.exporters.common import (
    format_amount,
    format_summary_value,
    summary_label,
)
from ledger_modules.reporting.models import HierarchicalReport

logger = get_logger("modules.reporting.exporters.print_html")

PRINT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{{ title }} - {{ entity }}</title>
<style>
  @page { size: A4; margin: 15mm; }
  body { font-family: Helvetica, Arial, sans-serif; font-size: 10pt; }
  h1, h2 { text-align: center; margin: 0 0 4px 0; }
  h2 { font-weight: normal; color: #4a5568; }
  table { width: 100%; border-collapse: collapse; margin-bottom: 12px; }
  td.amount { text-align: right; width: 25%; }
  tr.subtotal td { font-weight: bold; }
  tr.subtotal td.amount { border-top: 1px solid #000; }
  tr.header td { font-weight: 600; }
</style>
</head>
<body>
<h1>{{ entity }}</h1>
<h2>{{ title }}</h2>
{% if period %}<h2>{{ period }}</h2>{% endif %}
{% for section in sections %}
<section class="report-section">
<h3>{{ section.name }}</h3>
<table>
{% for row in section.rows %}
<tr class="{{ row.css }}" data-level="{{ row.level }}">
  <td class="label" style="padding-left: {{ row.level * 16 }}px">{{ row.label }}</td>
  <td class="amount">{{ row.amount }}</td>
</tr>
{% endfor %}
</table>
</section>
{% endfor %}
{% if summary %}
<section class="summary">
<h3>Summary</h3>
<table>
{% for item in summary %}
<tr><td>{{ item.label }}</td><td class="amount">{{ item.value }}</td></tr>
{% endfor %}
</table>
</section>
{% endif %}
<footer>Generated {{ generated_at }}</footer>
</body>
</html>
"""


def _env() -> Environment:
    return Environment(loader=BaseLoader(), autoescape=select_autoescape())


def _row_css(row) -> str:
    if row.is_subtotal:
        return "subtotal"
    if row.is_header:
        return "header"
    return "line"


def render_print_html(report: HierarchicalReport, precision: int = 2) -> str:
    """
    Render the print page for a report.

    Raises:
        ExportError: the template failed to render.
    """
    meta = report.metadata
    context = {
        "entity": meta.entity_name,
        "title": meta.display_title,
        "period": meta.period_label,
        "generated_at": meta.generated_at,
        "sections": [
            {
                "name": section.name,
                "rows": [
                    {
                        "level": row.level,
                        "label": row.label,
                        "amount": format_amount(row.amount, precision),
                        "css": _row_css(row),
                    }
                    for row in section.rows
                ],
            }
            for section in report.report_sections
        ],
        "summary": [
            {"label": summary_label(key), "value": format_summary_value(value, precision)}
            for key, value in report.summary.items()
        ],
    }
    try:
        html = _env().from_string(PRINT_TEMPLATE).render(**context)
    except Exception as exc:
        raise ExportError("html", str(exc)) from exc
    logger.info(
        "report_exported",
        extra={"format": "html", "report_type": meta.report_type.value},
    )
    return html
