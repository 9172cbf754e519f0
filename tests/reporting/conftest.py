"""
Reporting-specific test fixtures.

Provides:
- ``ChartFactory`` for synthetic chart-of-accounts data (no DB required)
- The standard balanced balance-sheet chart and a P&L chart
- ReportingService wired to an in-memory balance source
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.balances import BalanceWindow, InMemoryBalanceSource
from ledger_kernel.domain.chart import (
    AccountBalanceRecord,
    AccountType,
    AccountWithChain,
    GroupDirectory,
    GroupRecord,
    resolve_all,
)
from ledger_kernel.domain.hierarchy import GroupLevel
from ledger_modules.reporting.config import ReportingConfig
from ledger_modules.reporting.models import ReportMetadata, ReportType
from ledger_modules.reporting.service import ReportingService

TENANT = "tenant-1"
AS_OF = date(2024, 12, 31)
PERIOD_START = date(2024, 1, 1)
PERIOD_END = date(2024, 12, 31)


class ChartFactory:
    """
    Builds group metadata and account records by name path.

    Group ids are derived from the path, so the same path always maps to
    the same groups.
    """

    def __init__(self):
        self.directory = GroupDirectory()
        self.records: list[AccountBalanceRecord] = []

    def _ensure(self, level: GroupLevel, key: str, name: str, parent: str | None) -> str:
        if self.directory.get(level, key) is None:
            self.directory.add(GroupRecord(id=key, name=name, level=level, parent_id=parent))
        return key

    def group(self, main: str, element: str, sub_element: str, detailed: str) -> str:
        """Create the path if needed and return the detailed group id."""
        main_id = self._ensure(GroupLevel.MAIN, f"m:{main}", main, None)
        element_id = self._ensure(
            GroupLevel.ELEMENT, f"{main_id}/e:{element}", element, main_id,
        )
        sub_id = self._ensure(
            GroupLevel.SUB_ELEMENT, f"{element_id}/s:{sub_element}", sub_element, element_id,
        )
        return self._ensure(
            GroupLevel.DETAILED, f"{sub_id}/d:{detailed}", detailed, sub_id,
        )

    def account(
        self,
        code: str,
        name: str,
        account_type: AccountType,
        balance: str | Decimal,
        path: tuple[str, str, str, str],
    ) -> AccountBalanceRecord:
        record = AccountBalanceRecord(
            account_id=f"acct-{code}",
            account_code=code,
            account_name=name,
            account_type=account_type,
            balance=Decimal(balance),
            detailed_group_id=self.group(*path),
        )
        self.records.append(record)
        return record

    def resolved(self) -> list[AccountWithChain]:
        return resolve_all(self.records, self.directory)

    def source(self, window: BalanceWindow, tenant_id: str = TENANT) -> InMemoryBalanceSource:
        source = InMemoryBalanceSource()
        source.set_groups(tenant_id, self.directory)
        source.put(tenant_id, window, self.records)
        return source


CASH_PATH = ("balance_sheet", "Assets", "Current Assets", "Cash and Bank")
RECEIVABLES_PATH = ("balance_sheet", "Assets", "Current Assets", "Receivables")
EQUIPMENT_PATH = ("balance_sheet", "Assets", "Fixed Assets", "Equipment")
PAYABLES_PATH = ("balance_sheet", "Liabilities", "Current Liabilities", "Trade Payables")
CAPITAL_PATH = ("balance_sheet", "Equity", "Owners Equity", "Share Capital")
SALES_PATH = ("profit_and_loss", "Incomes", "Operating Income", "Sales")
SERVICES_PATH = ("profit_and_loss", "Incomes", "Operating Income", "Services")
RENT_PATH = ("profit_and_loss", "Expenses", "Operating Expenses", "Occupancy")
PAYROLL_PATH = ("profit_and_loss", "Expenses", "Operating Expenses", "Payroll")


def metadata_for(report_type: ReportType = ReportType.BALANCE_SHEET, **kwargs) -> ReportMetadata:
    defaults = {
        "entity_name": "Test Company",
        "currency": "USD",
        "generated_at": "2024-12-31T23:59:59+00:00",
    }
    if report_type is ReportType.BALANCE_SHEET:
        defaults["as_of_date"] = AS_OF
    else:
        defaults["period_start"] = PERIOD_START
        defaults["period_end"] = PERIOD_END
    defaults.update(kwargs)
    return ReportMetadata(report_type=report_type, **defaults)


@pytest.fixture
def chart() -> ChartFactory:
    return ChartFactory()


@pytest.fixture
def simple_balance_sheet(chart) -> ChartFactory:
    """Cash 1000 / AP 400 / Capital 600, one detailed group each."""
    chart.account("1000", "Cash", AccountType.ASSET, "1000", CASH_PATH)
    chart.account("2000", "Accounts Payable", AccountType.LIABILITY, "400", PAYABLES_PATH)
    chart.account("3000", "Capital", AccountType.EQUITY, "600", CAPITAL_PATH)
    return chart


@pytest.fixture
def profit_and_loss_chart(chart) -> ChartFactory:
    """Revenue 5000 (3000 + 2000), expenses 3200 (1200 + 2000)."""
    chart.account("4000", "Product Sales", AccountType.REVENUE, "3000", SALES_PATH)
    chart.account("4100", "Consulting", AccountType.REVENUE, "2000", SERVICES_PATH)
    chart.account("5000", "Rent", AccountType.EXPENSE, "1200", RENT_PATH)
    chart.account("5100", "Salaries", AccountType.EXPENSE, "2000", PAYROLL_PATH)
    return chart


@pytest.fixture
def reporting_config() -> ReportingConfig:
    """Standard reporting configuration for tests."""
    return ReportingConfig.with_defaults()


@pytest.fixture
def make_service(deterministic_clock, reporting_config):
    """Factory: ReportingService over a ChartFactory for one window."""

    def _make(factory: ChartFactory, window: BalanceWindow, config: ReportingConfig | None = None):
        return ReportingService(
            balance_source=factory.source(window),
            clock=deterministic_clock,
            config=config or reporting_config,
        )

    return _make
