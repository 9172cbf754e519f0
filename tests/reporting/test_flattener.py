"""
Flattener unit tests: row order, levels, subtotals and display levels.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from ledger_kernel.domain.hierarchy import GroupRef, HierarchyChain, RollupEntry
from ledger_modules.reporting.builder import build_hierarchy
from ledger_modules.reporting.flattener import flatten
from ledger_modules.reporting.models import DisplayLevel, ReportRow


def _chain(element: str, sub: str, detailed: str) -> HierarchyChain:
    return HierarchyChain(
        main=GroupRef("bs", "Balance Sheet"),
        element=GroupRef(element, element),
        sub_element=GroupRef(f"{element}/{sub}", sub),
        detailed=GroupRef(f"{element}/{sub}/{detailed}", detailed),
    )


def _assets():
    return build_hierarchy("Assets", [
        RollupEntry("1000", "Cash (1000)", Decimal("100"), _chain("Assets", "Current", "Cash")),
        RollupEntry("1010", "Petty Cash (1010)", Decimal("5"), _chain("Assets", "Current", "Cash")),
        RollupEntry("1500", "Van (1500)", Decimal("300"), _chain("Assets", "Fixed", "Vehicles")),
    ])


class TestFullLayout:

    def test_exact_row_sequence(self):
        assert flatten(_assets()) == (
            ReportRow(0, "Balance Sheet", None),
            ReportRow(1, "Assets", None),
            ReportRow(2, "Current", None),
            ReportRow(3, "Cash", Decimal("105")),
            ReportRow(4, "Cash (1000)", Decimal("100")),
            ReportRow(4, "Petty Cash (1010)", Decimal("5")),
            ReportRow(2, "Total Current", Decimal("105"), is_subtotal=True),
            ReportRow(2, "Fixed", None),
            ReportRow(3, "Vehicles", Decimal("300")),
            ReportRow(4, "Van (1500)", Decimal("300")),
            ReportRow(2, "Total Fixed", Decimal("300"), is_subtotal=True),
            ReportRow(1, "Total Assets", Decimal("405"), is_subtotal=True),
            ReportRow(0, "Total Balance Sheet", Decimal("405"), is_subtotal=True),
            ReportRow(0, "Total Assets", Decimal("405"), is_subtotal=True),
        )

    def test_header_rows_have_blank_amount(self):
        rows = flatten(_assets())
        headers = [r for r in rows if r.is_header]
        assert [r.label for r in headers] == ["Balance Sheet", "Assets", "Current", "Fixed"]
        assert not any(r.is_subtotal for r in headers)

    def test_custom_subtotal_prefix(self):
        rows = flatten(_assets(), subtotal_prefix="Sum of")
        assert rows[-1].label == "Sum of Assets"

    def test_flatten_is_repeatable(self):
        root = _assets()
        assert flatten(root) == flatten(root)


class TestEmptyInput:

    def test_empty_section_is_single_zero_total(self):
        rows = flatten(build_hierarchy("Equity", []))
        assert rows == (ReportRow(0, "Total Equity", Decimal("0"), is_subtotal=True),)

    def test_empty_declared_group_emits_header_and_zero_total(self):
        root = build_hierarchy("Equity", [], declared=[_chain("Equity", "Reserves", "General")])
        rows = flatten(root)
        assert ReportRow(2, "Reserves", None) in rows
        assert ReportRow(2, "Total Reserves", Decimal("0"), is_subtotal=True) in rows
        assert ReportRow(3, "General", Decimal("0")) in rows


class TestDisplayLevels:

    @pytest.mark.parametrize(
        "display_level, labels",
        [
            (DisplayLevel.MAIN, ["Balance Sheet"]),
            (DisplayLevel.ELEMENT, ["Assets"]),
            (DisplayLevel.SUB_ELEMENT, ["Current", "Fixed"]),
            (DisplayLevel.DETAILED, ["Cash", "Vehicles"]),
            (DisplayLevel.ACCOUNT, ["Cash (1000)", "Petty Cash (1010)", "Van (1500)"]),
        ],
    )
    def test_collapsed_rows(self, display_level, labels):
        rows = flatten(_assets(), display_level=display_level)
        assert [r.label for r in rows[:-1]] == labels
        assert all(r.level == 0 and r.amount is not None for r in rows)

    @pytest.mark.parametrize("display_level", list(DisplayLevel))
    def test_grand_total_same_for_every_level(self, display_level):
        rows = flatten(_assets(), display_level=display_level)
        assert rows[-1] == ReportRow(0, "Total Assets", Decimal("405"), is_subtotal=True)

    def test_collapsed_amounts_sum_to_total(self):
        rows = flatten(_assets(), display_level=DisplayLevel.SUB_ELEMENT)
        assert sum(r.amount for r in rows[:-1]) == rows[-1].amount

    def test_display_level_accepts_string(self):
        rows = flatten(_assets(), display_level="detailed")
        assert [r.label for r in rows[:-1]] == ["Cash", "Vehicles"]
