"""
Hierarchical Reporting Module (``ledger_modules.reporting``).

Responsibility
--------------
Read-only module that rolls pre-aggregated account balances up the
4-level chart-of-accounts hierarchy (Main Group -> Element Group ->
Sub-Element Group -> Detailed Group -> Account) and emits one ordered row
sequence per report section.  The same rows feed the on-screen table, the
spreadsheet export and the print/PDF export.

Architecture position
---------------------
**Modules layer**.  ``builder``, ``flattener`` and ``statements`` are pure
functions; ``ReportingService`` bridges an injected ``BalanceSource`` to
them; ``exporters`` only ever read rows.

Invariants enforced
-------------------
* Every account resolves to a full ancestor chain or the report fails.
* Child order is first-insertion order.
* Every ``Total <name>`` row equals the sum of the leaves beneath it.

Failure modes
-------------
* ``IntegrityError`` subclasses for unresolved chains and misplaced
  account types.
* ``IngestionError`` subclasses for malformed collaborator payloads.
* ``ExportError`` when a renderer fails; the rows are untouched.
"""

from ledger_modules.reporting.builder import HierarchyBuilder, build_hierarchy
from ledger_modules.reporting.config import ReportingConfig
from ledger_modules.reporting.flattener import flatten
from ledger_modules.reporting.ingestion import ingest_account_records, ingest_group_records
from ledger_modules.reporting.models import (
    BalanceSheetReport,
    DisplayLevel,
    ExpenseItem,
    ExpenseReport,
    GroupedReport,
    ProfitLossReport,
    ReportMetadata,
    ReportRow,
    ReportSection,
    ReportType,
    TaxDirection,
    TaxItem,
    TaxSummaryReport,
)
from ledger_modules.reporting.service import ReportingService
from ledger_modules.reporting.statements import (
    assemble_balance_sheet,
    assemble_expense_report,
    assemble_grouped_report,
    assemble_profit_loss,
    assemble_tax_summary,
)

__all__ = [
    "BalanceSheetReport",
    "DisplayLevel",
    "ExpenseItem",
    "ExpenseReport",
    "GroupedReport",
    "HierarchyBuilder",
    "ProfitLossReport",
    "ReportMetadata",
    "ReportRow",
    "ReportSection",
    "ReportType",
    "ReportingConfig",
    "ReportingService",
    "TaxDirection",
    "TaxItem",
    "TaxSummaryReport",
    "assemble_balance_sheet",
    "assemble_expense_report",
    "assemble_grouped_report",
    "assemble_profit_loss",
    "assemble_tax_summary",
    "build_hierarchy",
    "flatten",
    "ingest_account_records",
    "ingest_group_records",
]
