"""
Shared helpers for the report exporters.

Every exporter consumes ``ReportRow`` sequences exactly as the flattener
produced them.  Nothing here looks at the hierarchy.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from ledger_modules.reporting.models import HierarchicalReport

INDENT_PER_LEVEL = 2


def quantize(amount: Decimal, precision: int) -> Decimal:
    return amount.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal | None, precision: int = 2) -> str:
    """``1234.5`` -> ``"1,234.50"``; negatives in parentheses; blank for None."""
    if amount is None:
        return ""
    rounded = quantize(amount, precision)
    text = f"{abs(rounded):,.{precision}f}"
    return f"({text})" if rounded < 0 else text


def summary_label(key: str) -> str:
    """``total_liabilities_and_equity`` -> ``Total Liabilities And Equity``."""
    return key.replace("_", " ").title()


def format_summary_value(value: Any, precision: int = 2) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, Decimal):
        return format_amount(value, precision)
    return str(value)


def export_filename(report: HierarchicalReport, extension: str) -> str:
    """``<report_type>_<entity>_<date>.<ext>`` with a filesystem-safe entity."""
    meta = report.metadata
    entity = re.sub(r"[^A-Za-z0-9]+", "_", meta.entity_name).strip("_") or "report"
    stamp_date = meta.as_of_date or meta.period_end
    stamp = f"_{stamp_date.strftime('%Y%m%d')}" if stamp_date else ""
    return f"{meta.report_type.value}_{entity}{stamp}.{extension.lstrip('.')}"
