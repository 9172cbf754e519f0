"""
Reporting Module Service (``ledger_modules.reporting.service``).

Responsibility
--------------
Orchestrates hierarchical report generation -- balance sheet, profit and
loss, tax summary and expense report -- by bridging the injected
``BalanceSource`` to the pure assembly functions in ``statements.py``.
This is a **read-only** service.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ReportingService`` is the public entry
point for hierarchical reports.  Constructor: ``balance_source`` +
``clock`` + ``config``.

Invariants enforced
-------------------
* Invalid date windows raise ``ValueError`` before any retrieval.
* Every account's ancestor chain is resolved before assembly; one
  unresolved chain fails the whole report.
* Amounts stay ``Decimal`` end to end.
* Report metadata carries the generation timestamp from the injected
  clock.

Failure modes
-------------
* Balance source failure  -> exception propagates unchanged.
* ``ChainResolutionError`` / ``SectionMismatchError``  -> logged as
  ``chain_unresolved`` / ``section_mismatch`` and re-raised.
* Missing data  -> empty sections, each with a zero grand total.

Audit relevance
---------------
Structured log events are emitted for every report generated, carrying
tenant, window and headline totals.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from ledger_kernel.domain.balances import BalanceSource, BalanceWindow
from ledger_kernel.domain.chart import AccountWithChain, MainGroupKind, resolve_all
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.exceptions import ChainResolutionError, SectionMismatchError
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_modules.reporting.config import ReportingConfig
from ledger_modules.reporting.models import (
    BalanceSheetReport,
    DisplayLevel,
    ExpenseItem,
    ExpenseReport,
    HierarchicalReport,
    ProfitLossReport,
    ReportMetadata,
    ReportType,
    TaxItem,
    TaxSummaryReport,
)
from ledger_modules.reporting.statements import (
    DeclaredGroups,
    ExpenseGrouping,
    TaxGrouping,
    assemble_balance_sheet,
    assemble_expense_report,
    assemble_profit_loss,
    assemble_tax_summary,
    declared_chains,
)

logger = get_logger("modules.reporting.service")


class ReportingService:
    """
    Hierarchical report generation service.

    Contract
    --------
    * Every public method returns a typed report DTO.
    * All methods are **read-only**.

    Guarantees
    ----------
    * Report generation delegates to pure functions in ``statements.py``;
      no rollup logic lives in this class.
    * ``generated_at`` comes from the injected clock only.

    Non-goals
    ---------
    * Does NOT compute balances from journal lines.
    * Does NOT enforce tenant isolation beyond passing ``tenant_id`` to
      the balance source.
    """

    def __init__(
        self,
        balance_source: BalanceSource,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._source = balance_source
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()

        logger.info(
            "reporting_service_initialized",
            extra={
                "entity_name": self._config.entity_name,
                "default_currency": self._config.default_currency,
                "source": type(balance_source).__name__,
            },
        )

    @property
    def config(self) -> ReportingConfig:
        return self._config

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _build_metadata(
        self,
        report_type: ReportType,
        display_level: DisplayLevel | str | None,
        as_of_date: date | None = None,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> ReportMetadata:
        """Header shared by every report kind; stamped from ``self._clock``."""
        return ReportMetadata(
            report_type=report_type,
            entity_name=self._config.entity_name,
            currency=self._config.default_currency,
            generated_at=self._clock.now().isoformat(),
            as_of_date=as_of_date,
            period_start=period_start,
            period_end=period_end,
            display_level=DisplayLevel(
                display_level or self._config.default_display_level
            ),
        )

    def _load(
        self,
        tenant_id: str,
        window: BalanceWindow,
        kind: MainGroupKind,
    ) -> tuple[list[AccountWithChain], DeclaredGroups | None]:
        """Fetch one snapshot and resolve every account chain."""
        snapshot = self._source.fetch_balances(tenant_id, window)
        try:
            accounts = resolve_all(snapshot.records, snapshot.groups)
            declared = (
                declared_chains(snapshot.groups, kind, self._config)
                if self._config.include_empty_groups
                else None
            )
        except ChainResolutionError as exc:
            logger.error(
                "chain_unresolved",
                extra={
                    "code": exc.code,
                    "account_id": exc.account_id,
                    "level": exc.level,
                    "missing_id": exc.missing_id,
                },
            )
            raise

        logger.debug(
            "accounts_resolved_for_reporting",
            extra={"account_count": len(accounts), **window.describe()},
        )
        return accounts, declared

    def _log_mismatch(self, exc: SectionMismatchError) -> None:
        logger.error(
            "section_mismatch",
            extra={
                "code": exc.code,
                "account_id": exc.account_id,
                "account_type": exc.account_type,
                "main_group": exc.main_group,
            },
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def balance_sheet(
        self,
        tenant_id: str,
        as_of_date: date,
        display_level: DisplayLevel | str | None = None,
    ) -> BalanceSheetReport:
        """
        Generate a point-in-time balance sheet.

        Args:
            tenant_id: Tenant whose balances are read.
            as_of_date: Snapshot date.
            display_level: Collapse depth (defaults to config).

        Returns:
            BalanceSheetReport with the A = L + E diagnostic.
        """
        window = BalanceWindow.as_of(as_of_date)
        with LogContext.bind(tenant_id=tenant_id):
            accounts, declared = self._load(
                tenant_id, window, MainGroupKind.BALANCE_SHEET,
            )
            metadata = self._build_metadata(
                ReportType.BALANCE_SHEET, display_level, as_of_date=as_of_date,
            )
            try:
                report = assemble_balance_sheet(
                    accounts, self._config, metadata, declared,
                )
            except SectionMismatchError as exc:
                self._log_mismatch(exc)
                raise

            logger.info(
                "balance_sheet_assembled",
                extra={
                    "as_of_date": as_of_date.isoformat(),
                    "total_assets": str(report.total_assets),
                    "total_l_and_e": str(report.total_liabilities_and_equity),
                    "is_balanced": report.is_balanced,
                },
            )
            if not report.is_balanced:
                logger.warning(
                    "balance_sheet_out_of_balance",
                    extra={"difference": str(report.difference)},
                )
        return report

    def profit_and_loss(
        self,
        tenant_id: str,
        start_date: date,
        end_date: date,
        display_level: DisplayLevel | str | None = None,
    ) -> ProfitLossReport:
        """
        Generate a profit and loss statement for an inclusive period.

        Raises:
            ValueError: end_date is before start_date (nothing is fetched).
        """
        window = BalanceWindow.period(start_date, end_date)
        with LogContext.bind(tenant_id=tenant_id):
            accounts, declared = self._load(
                tenant_id, window, MainGroupKind.PROFIT_AND_LOSS,
            )
            metadata = self._build_metadata(
                ReportType.PROFIT_AND_LOSS, display_level,
                period_start=start_date, period_end=end_date,
            )
            try:
                report = assemble_profit_loss(
                    accounts, self._config, metadata, declared,
                )
            except SectionMismatchError as exc:
                self._log_mismatch(exc)
                raise

            logger.info(
                "profit_and_loss_assembled",
                extra={
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                    "total_revenue": str(report.total_revenue),
                    "total_expense": str(report.total_expense),
                    "net_income": str(report.net_income),
                },
            )
        return report

    def tax_summary(
        self,
        tenant_id: str,
        start_date: date,
        end_date: date,
        items: Iterable[TaxItem],
        grouping: TaxGrouping | None = None,
        display_level: DisplayLevel | str | None = None,
    ) -> TaxSummaryReport:
        """
        Generate a tax summary from caller-supplied tax lines.

        ``grouping`` maps a tax line to its 4-level chain; the default is
        Tax -> jurisdiction -> tax type -> tax code.
        """
        BalanceWindow.period(start_date, end_date)  # raises on an inverted period
        with LogContext.bind(tenant_id=tenant_id):
            metadata = self._build_metadata(
                ReportType.TAX_SUMMARY, display_level,
                period_start=start_date, period_end=end_date,
            )
            report = assemble_tax_summary(items, self._config, metadata, grouping)
            logger.info(
                "tax_summary_assembled",
                extra={
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                    "total_tax_collected": str(report.total_tax_collected),
                    "total_tax_paid": str(report.total_tax_paid),
                    "net_tax_position": str(report.net_tax_position),
                },
            )
        return report

    def expense_report(
        self,
        tenant_id: str,
        start_date: date,
        end_date: date,
        items: Iterable[ExpenseItem],
        grouping: ExpenseGrouping | None = None,
        display_level: DisplayLevel | str | None = None,
    ) -> ExpenseReport:
        """
        Generate an expense report from caller-supplied expense lines.

        Default grouping: Expense Report -> department -> category -> payee.
        """
        BalanceWindow.period(start_date, end_date)  # raises on an inverted period
        with LogContext.bind(tenant_id=tenant_id):
            metadata = self._build_metadata(
                ReportType.EXPENSE_REPORT, display_level,
                period_start=start_date, period_end=end_date,
            )
            report = assemble_expense_report(items, self._config, metadata, grouping)
            logger.info(
                "expense_report_assembled",
                extra={
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                    "total_expenses": str(report.total_expenses),
                    "item_count": report.item_count,
                },
            )
        return report

    def to_dict(self, report: HierarchicalReport) -> dict:
        """Convert a report to a JSON-ready dict ``{metadata, sections, summary}``."""
        return report.to_dict()
