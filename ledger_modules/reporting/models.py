"""
Hierarchical Reporting Domain Models (``ledger_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for the hierarchical reports: the flattened
``ReportRow`` contract, report metadata, one ``ReportSection`` per rolled-up
hierarchy, and the four report types (balance sheet, profit and loss, tax
summary, expense report) plus the generic grouped report.  Also the
non-ledger inputs of the tax and expense reports.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Built by the
pure functions in ``statements.py`` and returned by ``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``ReportRow.level`` is never negative.
* Row order inside a section is the only contract with renderers.

Failure modes
-------------
* ``ValueError`` on a negative row level or an unknown enum value.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from ledger_kernel.domain.hierarchy import ZERO, SectionNode


# =========================================================================
# Enums
# =========================================================================


class ReportType(str, Enum):
    """Types of hierarchical reports."""

    BALANCE_SHEET = "balance_sheet"
    PROFIT_AND_LOSS = "profit_and_loss"
    TAX_SUMMARY = "tax_summary"
    EXPENSE_REPORT = "expense_report"
    GROUPED = "grouped"


class DisplayLevel(str, Enum):
    """
    Depth at which a report is shown.

    ``ALL`` renders the full hierarchy with headers and subtotals.  Every
    other value collapses the report to one row per node at that depth.
    """

    MAIN = "main"
    ELEMENT = "element"
    SUB_ELEMENT = "sub_element"
    DETAILED = "detailed"
    ACCOUNT = "account"
    ALL = "all"

    @property
    def depth(self) -> int | None:
        return _DISPLAY_DEPTHS.get(self)


_DISPLAY_DEPTHS = {
    DisplayLevel.MAIN: 0,
    DisplayLevel.ELEMENT: 1,
    DisplayLevel.SUB_ELEMENT: 2,
    DisplayLevel.DETAILED: 3,
    DisplayLevel.ACCOUNT: 4,
}


class TaxDirection(str, Enum):
    """Whether a tax line was collected from customers or paid to suppliers."""

    COLLECTED = "collected"
    PAID = "paid"


# =========================================================================
# Row contract
# =========================================================================


@dataclass(frozen=True)
class ReportRow:
    """
    One line of a flattened report.

    ``amount is None`` is the blank amount of a group header row.
    """

    level: int
    label: str
    amount: Decimal | None
    is_subtotal: bool = False

    def __post_init__(self):
        if self.level < 0:
            raise ValueError(f"row level cannot be negative: {self.level}")

    @property
    def is_header(self) -> bool:
        return self.amount is None


# =========================================================================
# Report Metadata (common to all reports)
# =========================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every hierarchical report."""

    report_type: ReportType
    entity_name: str
    currency: str
    generated_at: str  # ISO format timestamp from injected clock
    as_of_date: date | None = None
    period_start: date | None = None
    period_end: date | None = None
    display_level: DisplayLevel = DisplayLevel.ALL
    title: str | None = None

    @property
    def display_title(self) -> str:
        if self.title:
            return self.title
        return self.report_type.value.replace("_", " ").title()

    @property
    def period_label(self) -> str:
        if self.as_of_date is not None:
            return f"As of {self.as_of_date.isoformat()}"
        if self.period_start is not None and self.period_end is not None:
            return f"{self.period_start.isoformat()} to {self.period_end.isoformat()}"
        return ""


# =========================================================================
# Sections and reports
# =========================================================================


@dataclass(frozen=True)
class ReportSection:
    """A rolled-up hierarchy and its flattened rows."""

    name: str
    hierarchy: SectionNode
    rows: tuple[ReportRow, ...]

    @property
    def total(self) -> Decimal:
        return self.hierarchy.amount


@dataclass(frozen=True)
class HierarchicalReport:
    """Base for every report: metadata plus ordered sections."""

    metadata: ReportMetadata
    report_sections: tuple[ReportSection, ...]

    @property
    def sections(self) -> dict[str, tuple[ReportRow, ...]]:
        return {s.name: s.rows for s in self.report_sections}

    @property
    def hierarchies(self) -> dict[str, SectionNode]:
        return {s.name: s.hierarchy for s in self.report_sections}

    @property
    def summary(self) -> dict[str, Any]:
        return {}

    def section(self, name: str) -> ReportSection:
        for s in self.report_sections:
            if s.name == name:
                return s
        raise KeyError(name)

    def to_dict(self) -> dict[str, Any]:
        """Output contract: ``{metadata, sections, summary}``."""
        return {
            "metadata": render_to_dict(self.metadata),
            "sections": render_to_dict(self.sections),
            "summary": render_to_dict(self.summary),
        }


@dataclass(frozen=True)
class BalanceSheetReport(HierarchicalReport):
    """
    Point-in-time balance sheet.

    ``is_balanced`` is diagnostic only.  An unbalanced sheet is still a
    valid report and carries the non-zero ``difference``.
    """

    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_liabilities_and_equity: Decimal
    difference: Decimal  # assets - (liabilities + equity)
    is_balanced: bool

    @property
    def summary(self) -> dict[str, Any]:
        return {
            "total_assets": self.total_assets,
            "total_liabilities": self.total_liabilities,
            "total_equity": self.total_equity,
            "total_liabilities_and_equity": self.total_liabilities_and_equity,
            "difference": self.difference,
            "is_balanced": self.is_balanced,
        }


@dataclass(frozen=True)
class ProfitLossReport(HierarchicalReport):
    """Period-accumulated revenue and expenses."""

    total_revenue: Decimal
    total_expense: Decimal
    net_income: Decimal

    @property
    def summary(self) -> dict[str, Any]:
        return {
            "total_revenue": self.total_revenue,
            "total_expense": self.total_expense,
            "net_income": self.net_income,
        }


@dataclass(frozen=True)
class TaxSummaryReport(HierarchicalReport):
    total_tax_collected: Decimal
    total_tax_paid: Decimal
    net_tax_position: Decimal  # collected - paid

    @property
    def summary(self) -> dict[str, Any]:
        return {
            "total_tax_collected": self.total_tax_collected,
            "total_tax_paid": self.total_tax_paid,
            "net_tax_position": self.net_tax_position,
        }


@dataclass(frozen=True)
class ExpenseReport(HierarchicalReport):
    total_expenses: Decimal
    item_count: int  # contributing (non-zero) items

    @property
    def summary(self) -> dict[str, Any]:
        return {
            "total_expenses": self.total_expenses,
            "item_count": self.item_count,
        }


@dataclass(frozen=True)
class GroupedReport(HierarchicalReport):
    """Report over caller-defined groupings; one total per section."""

    @property
    def summary(self) -> dict[str, Any]:
        totals: dict[str, Any] = {s.name: s.total for s in self.report_sections}
        totals["grand_total"] = sum(
            (s.total for s in self.report_sections), ZERO,
        )
        return totals


# =========================================================================
# Non-ledger report inputs
# =========================================================================


@dataclass(frozen=True)
class TaxItem:
    """One tax line for the tax summary, already scoped to the period."""

    item_id: str
    description: str
    amount: Decimal
    direction: TaxDirection
    jurisdiction: str
    tax_type: str
    tax_code: str


@dataclass(frozen=True)
class ExpenseItem:
    """One expense line for the expense report, already scoped to the period."""

    item_id: str
    description: str
    amount: Decimal
    department: str
    category: str
    payee: str


# =========================================================================
# Renderer (dict/JSON output)
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report value to plain data for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - UUID -> str
    - date/datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
