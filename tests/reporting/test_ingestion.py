"""
Tests for collaborator payload ingestion.

Balances must arrive as finite decimals; anything else is rejected before
it can reach a rollup.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from ledger_kernel.domain.chart import AccountType, GroupDirectory, resolve_all
from ledger_kernel.domain.hierarchy import GroupLevel
from ledger_kernel.exceptions import InvalidAccountTypeError, MalformedBalanceError
from ledger_modules.reporting.ingestion import (
    ingest_account_record,
    ingest_account_records,
    ingest_group_records,
    parse_balance,
)


def _row(**overrides):
    row = {
        "accountId": "a1",
        "accountCode": "1000",
        "accountName": "Cash",
        "accountType": "asset",
        "balance": "1000.50",
        "detailedGroupId": "d1",
    }
    row.update(overrides)
    return row


class TestParseBalance:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1000.50", Decimal("1000.50")),
            (" -12 ", Decimal("-12")),
            (7, Decimal("7")),
            (0.1, Decimal("0.1")),
            (Decimal("3.14159"), Decimal("3.14159")),
        ],
    )
    def test_valid(self, raw, expected):
        assert parse_balance("a1", raw) == expected

    @pytest.mark.parametrize(
        "raw", [None, True, "abc", "", "NaN", "Infinity", float("inf"), float("nan"), [1]],
    )
    def test_rejected(self, raw):
        with pytest.raises(MalformedBalanceError) as exc_info:
            parse_balance("a1", raw)
        assert exc_info.value.account_id == "a1"
        assert exc_info.value.code == "MALFORMED_BALANCE"


class TestIngestAccountRecord:

    def test_camel_case_keys(self):
        record = ingest_account_record(
            _row(elementGroupName="Assets", mainGroupName="balance_sheet"),
        )
        assert record.account_id == "a1"
        assert record.account_type is AccountType.ASSET
        assert record.balance == Decimal("1000.50")
        assert record.element_group_name == "Assets"
        assert record.sub_element_group_name is None

    def test_snake_case_keys(self):
        record = ingest_account_record({
            "account_id": "a2",
            "account_code": "2000",
            "account_name": "Payables",
            "account_type": "LIABILITY",
            "balance": 400,
            "detailed_group_id": "d2",
        })
        assert record.account_type is AccountType.LIABILITY
        assert record.label == "Payables (2000)"

    def test_missing_balance(self):
        row = _row()
        del row["balance"]
        with pytest.raises(MalformedBalanceError):
            ingest_account_record(row)

    def test_invalid_account_type(self):
        with pytest.raises(InvalidAccountTypeError) as exc_info:
            ingest_account_record(_row(accountType="contra"))
        assert exc_info.value.account_id == "a1"

    def test_missing_identifier(self):
        row = _row()
        del row["accountId"]
        with pytest.raises(ValueError, match="account_id"):
            ingest_account_record(row)

    def test_missing_detailed_group_is_left_for_resolution(self):
        row = _row()
        del row["detailedGroupId"]
        assert ingest_account_record(row).detailed_group_id is None

    def test_many_records_keep_order(self):
        records = ingest_account_records(
            [_row(accountId="b"), _row(accountId="a"), _row(accountId="c")],
        )
        assert [r.account_id for r in records] == ["b", "a", "c"]

    def test_first_bad_row_fails_all(self):
        with pytest.raises(MalformedBalanceError):
            ingest_account_records([_row(), _row(accountId="bad", balance="x")])


class TestIngestGroupRecords:

    def test_fixed_level(self):
        records = ingest_group_records(
            [{"id": "e1", "name": "Assets", "parentId": "m1"}], level="element",
        )
        assert records[0].level is GroupLevel.ELEMENT
        assert records[0].parent_id == "m1"

    def test_level_per_row(self):
        records = ingest_group_records([
            {"id": "m1", "name": "balance_sheet", "level": "main"},
            {"id": "s1", "name": "Current", "level": "sub_element", "parent_id": "e1"},
        ])
        assert [r.level for r in records] == [GroupLevel.MAIN, GroupLevel.SUB_ELEMENT]

    def test_main_group_with_parent_rejected(self):
        with pytest.raises(ValueError, match="cannot have a parent"):
            ingest_group_records(
                [{"id": "m1", "name": "balance_sheet", "parentId": "x"}], level=GroupLevel.MAIN,
            )

    def test_missing_name_rejected(self):
        with pytest.raises(ValueError, match="name"):
            ingest_group_records([{"id": "d1"}], level="detailed")

    def test_ingested_payload_resolves(self):
        groups = GroupDirectory.from_records(
            ingest_group_records([{"id": "m1", "name": "balance_sheet"}], level="main")
            + ingest_group_records([{"id": "e1", "name": "Assets", "parentId": "m1"}], level="element")
            + ingest_group_records([{"id": "s1", "name": "Current", "parentId": "e1"}], level="sub_element")
            + ingest_group_records([{"id": "d1", "name": "Cash", "parentId": "s1"}], level="detailed")
        )
        (resolved,) = resolve_all(ingest_account_records([_row()]), groups)
        assert resolved.chain.element.name == "Assets"
        assert resolved.main_group.value == "balance_sheet"
