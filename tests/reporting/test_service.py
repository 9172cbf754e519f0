"""
ReportingService orchestration tests.

The service is exercised over an in-memory balance source; the SQL path
is covered in tests/kernel/test_balance_selector.py.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.balances import BalanceSnapshot, BalanceSource, BalanceWindow
from ledger_kernel.domain.chart import AccountBalanceRecord, AccountType
from ledger_kernel.exceptions import ChainResolutionError, SectionMismatchError
from ledger_modules.reporting.config import ReportingConfig
from ledger_modules.reporting.models import (
    DisplayLevel,
    ExpenseItem,
    ReportRow,
    TaxDirection,
    TaxItem,
)
from ledger_modules.reporting.service import ReportingService
from tests.reporting.conftest import (
    AS_OF,
    EQUIPMENT_PATH,
    PERIOD_END,
    PERIOD_START,
    SALES_PATH,
    TENANT,
)


class _RecordingSource(BalanceSource):
    """Fails the test if fetched; used to prove validation happens first."""

    def __init__(self):
        self.calls: list[tuple[str, BalanceWindow]] = []

    def fetch_balances(self, tenant_id, window):
        self.calls.append((tenant_id, window))
        return BalanceSnapshot(records=())


def _messages(captured_logs) -> list[str]:
    return [r["message"] for r in captured_logs()]


class TestBalanceSheetService:

    def test_balanced_report(self, make_service, simple_balance_sheet):
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF))
        report = service.balance_sheet(TENANT, AS_OF)
        assert report.total_assets == Decimal("1000")
        assert report.is_balanced is True
        assert report.metadata.as_of_date == AS_OF

    def test_generated_at_from_injected_clock(self, make_service, simple_balance_sheet):
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF))
        report = service.balance_sheet(TENANT, AS_OF)
        assert report.metadata.generated_at == "2024-01-01T12:00:00+00:00"

    def test_other_date_is_empty(self, make_service, simple_balance_sheet):
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF))
        report = service.balance_sheet(TENANT, date(2023, 12, 31))
        assert report.total_assets == Decimal("0")
        assert report.sections["Assets"] == (
            ReportRow(0, "Total Assets", Decimal("0"), is_subtotal=True),
        )

    def test_other_tenant_sees_nothing(self, make_service, simple_balance_sheet):
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF))
        report = service.balance_sheet("tenant-2", AS_OF)
        assert report.total_liabilities_and_equity == Decimal("0")

    def test_logs_assembly(self, make_service, simple_balance_sheet, captured_logs):
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF))
        service.balance_sheet(TENANT, AS_OF)
        records = [r for r in captured_logs() if r["message"] == "balance_sheet_assembled"]
        assert len(records) == 1
        assert records[0]["tenant_id"] == TENANT
        assert records[0]["total_assets"] == "1000"
        assert records[0]["is_balanced"] is True
        assert "balance_sheet_out_of_balance" not in _messages(captured_logs)

    def test_unbalanced_logs_warning(self, make_service, simple_balance_sheet, captured_logs):
        simple_balance_sheet.account("1500", "Van", AccountType.ASSET, "50", EQUIPMENT_PATH)
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF))
        report = service.balance_sheet(TENANT, AS_OF)
        assert report.difference == Decimal("50")
        warnings = [r for r in captured_logs() if r["message"] == "balance_sheet_out_of_balance"]
        assert warnings and warnings[0]["level"] == "WARNING"
        assert warnings[0]["difference"] == "50"

    def test_unresolved_chain_logged_and_raised(
        self, make_service, simple_balance_sheet, captured_logs,
    ):
        simple_balance_sheet.records.append(
            AccountBalanceRecord(
                account_id="acct-orphan",
                account_code="9999",
                account_name="Orphan",
                account_type=AccountType.ASSET,
                balance=Decimal("5"),
                detailed_group_id="missing-group",
            )
        )
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF))
        with pytest.raises(ChainResolutionError) as exc_info:
            service.balance_sheet(TENANT, AS_OF)
        assert exc_info.value.account_id == "acct-orphan"
        errors = [r for r in captured_logs() if r["message"] == "chain_unresolved"]
        assert errors[0]["missing_id"] == "missing-group"
        assert errors[0]["code"] == "CHAIN_UNRESOLVED"

    def test_section_mismatch_logged_and_raised(
        self, make_service, chart, captured_logs,
    ):
        chart.account("1000", "Cash", AccountType.ASSET, "10", SALES_PATH)
        service = make_service(chart, BalanceWindow.as_of(AS_OF))
        with pytest.raises(SectionMismatchError):
            service.balance_sheet(TENANT, AS_OF)
        assert "section_mismatch" in _messages(captured_logs)

    def test_display_level_argument(self, make_service, simple_balance_sheet):
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF))
        report = service.balance_sheet(TENANT, AS_OF, display_level="element")
        assert report.metadata.display_level is DisplayLevel.ELEMENT
        assert report.sections["Liabilities"] == (
            ReportRow(0, "Liabilities", Decimal("400")),
            ReportRow(0, "Total Liabilities", Decimal("400"), is_subtotal=True),
        )

    def test_display_level_default_from_config(self, make_service, simple_balance_sheet):
        config = ReportingConfig(default_display_level=DisplayLevel.MAIN)
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF), config)
        report = service.balance_sheet(TENANT, AS_OF)
        assert report.sections["Equity"][0] == ReportRow(0, "Balance Sheet", Decimal("600"))

    def test_include_empty_groups(self, make_service, simple_balance_sheet):
        simple_balance_sheet.group(*EQUIPMENT_PATH)
        config = ReportingConfig(include_empty_groups=True)
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF), config)
        report = service.balance_sheet(TENANT, AS_OF)
        labels = [r.label for r in report.sections["Assets"]]
        assert "Equipment" in labels
        assert "Total Fixed Assets" in labels

    def test_to_dict(self, make_service, simple_balance_sheet):
        service = make_service(simple_balance_sheet, BalanceWindow.as_of(AS_OF))
        data = service.to_dict(service.balance_sheet(TENANT, AS_OF))
        assert data["metadata"]["report_type"] == "balance_sheet"
        assert data["metadata"]["generated_at"] == "2024-01-01T12:00:00+00:00"
        assert list(data["sections"]) == ["Assets", "Liabilities", "Equity"]


class TestProfitAndLossService:

    def test_net_income(self, make_service, profit_and_loss_chart, captured_logs):
        window = BalanceWindow.period(PERIOD_START, PERIOD_END)
        service = make_service(profit_and_loss_chart, window)
        report = service.profit_and_loss(TENANT, PERIOD_START, PERIOD_END)
        assert report.net_income == Decimal("1800")
        assert report.metadata.period_start == PERIOD_START
        assert "profit_and_loss_assembled" in _messages(captured_logs)

    def test_point_in_time_balances_not_used_for_period(
        self, make_service, profit_and_loss_chart,
    ):
        service = make_service(profit_and_loss_chart, BalanceWindow.as_of(PERIOD_END))
        report = service.profit_and_loss(TENANT, PERIOD_START, PERIOD_END)
        assert report.total_revenue == Decimal("0")

    def test_inverted_period_raises_before_fetch(self, deterministic_clock):
        source = _RecordingSource()
        service = ReportingService(source, clock=deterministic_clock)
        with pytest.raises(ValueError):
            service.profit_and_loss(TENANT, date(2024, 6, 1), date(2024, 5, 1))
        assert source.calls == []

    def test_single_day_period(self, deterministic_clock):
        source = _RecordingSource()
        service = ReportingService(source, clock=deterministic_clock)
        day = date(2024, 3, 15)
        report = service.profit_and_loss(TENANT, day, day)
        assert report.net_income == Decimal("0")
        assert source.calls == [(TENANT, BalanceWindow.period(day, day))]


class TestTaxAndExpenseService:

    def test_tax_summary(self, deterministic_clock, captured_logs):
        service = ReportingService(_RecordingSource(), clock=deterministic_clock)
        items = [
            TaxItem("t1", "Invoice 1", Decimal("80"), TaxDirection.COLLECTED, "CA", "GST", "S"),
            TaxItem("t2", "Bill 7", Decimal("30"), TaxDirection.PAID, "CA", "GST", "S"),
        ]
        report = service.tax_summary(TENANT, PERIOD_START, PERIOD_END, items)
        assert report.net_tax_position == Decimal("50")
        assert "tax_summary_assembled" in _messages(captured_logs)

    def test_tax_summary_rejects_inverted_period(self, deterministic_clock):
        service = ReportingService(_RecordingSource(), clock=deterministic_clock)
        with pytest.raises(ValueError):
            service.tax_summary(TENANT, PERIOD_END, PERIOD_START, [])

    def test_expense_report(self, deterministic_clock):
        service = ReportingService(_RecordingSource(), clock=deterministic_clock)
        items = [
            ExpenseItem("e1", "Flight", Decimal("420"), "Sales", "Travel", "Airline"),
            ExpenseItem("e2", "Hotel", Decimal("180"), "Sales", "Travel", "Hotel Co"),
        ]
        report = service.expense_report(
            TENANT, PERIOD_START, PERIOD_END, items, display_level=DisplayLevel.ELEMENT,
        )
        assert report.total_expenses == Decimal("600")
        assert report.item_count == 2
        assert report.sections["Expenses"][0] == ReportRow(0, "Sales", Decimal("600"))
