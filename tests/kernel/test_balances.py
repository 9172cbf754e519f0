"""Balance windows and the in-memory balance source."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.balances import BalanceWindow, InMemoryBalanceSource
from ledger_kernel.domain.chart import (
    AccountBalanceRecord,
    AccountType,
    GroupDirectory,
    GroupRecord,
)
from ledger_kernel.domain.hierarchy import GroupLevel


class TestBalanceWindow:

    def test_point_in_time(self):
        window = BalanceWindow.as_of(date(2024, 6, 30))
        assert window.is_point_in_time
        assert window.describe() == {"as_of_date": "2024-06-30"}

    def test_period_is_inclusive_and_single_day_allowed(self):
        window = BalanceWindow.period(date(2024, 1, 1), date(2024, 1, 1))
        assert not window.is_point_in_time

    def test_inverted_period_rejected(self):
        with pytest.raises(ValueError):
            BalanceWindow.period(date(2024, 2, 1), date(2024, 1, 31))

    def test_windows_are_hashable_keys(self):
        a = BalanceWindow.period(date(2024, 1, 1), date(2024, 3, 31))
        b = BalanceWindow.period(date(2024, 1, 1), date(2024, 3, 31))
        assert {a: 1}[b] == 1


class TestInMemoryBalanceSource:

    def _record(self) -> AccountBalanceRecord:
        return AccountBalanceRecord(
            account_id="a1",
            account_code="1000",
            account_name="Cash",
            account_type=AccountType.ASSET,
            balance=Decimal("10"),
            detailed_group_id="d1",
        )

    def test_returns_registered_snapshot(self):
        groups = GroupDirectory.from_records([GroupRecord("m1", "balance_sheet", GroupLevel.MAIN)])
        window = BalanceWindow.as_of(date(2024, 12, 31))
        source = InMemoryBalanceSource()
        source.set_groups("t1", groups)
        source.put("t1", window, [self._record()])

        snapshot = source.fetch_balances("t1", window)
        assert [r.account_id for r in snapshot.records] == ["a1"]
        assert snapshot.groups is groups

    def test_other_tenant_and_window_are_empty(self):
        window = BalanceWindow.as_of(date(2024, 12, 31))
        source = InMemoryBalanceSource()
        source.put("t1", window, [self._record()])

        assert source.fetch_balances("t2", window).records == ()
        assert source.fetch_balances("t1", BalanceWindow.as_of(date(2024, 11, 30))).records == ()
