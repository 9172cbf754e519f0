"""
Pure report assembly functions.

These functions partition resolved inputs into report sections, build one
hierarchy per section, flatten each into rows, and compute the summary
scalars.  ZERO I/O. ZERO side effects.

All monetary values are Decimal. All outputs are frozen dataclasses.

Functions in this module follow the ledger_kernel/domain/ purity convention:
- No database access
- No clock access (the caller stamps ``metadata.generated_at``)
- No file I/O
- Deterministic: same inputs always produce same outputs
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping, Sequence
from decimal import Decimal

from ledger_kernel.domain.chart import (
    AccountType,
    AccountWithChain,
    GroupDirectory,
    MainGroupKind,
)
from ledger_kernel.domain.hierarchy import (
    ZERO,
    DetailedGroupNode,
    GroupLevel,
    GroupRef,
    HierarchyChain,
    RollupEntry,
)
from ledger_kernel.exceptions import SectionMismatchError
from ledger_modules.reporting.builder import build_hierarchy
from ledger_modules.reporting.config import ReportingConfig
from ledger_modules.reporting.flattener import flatten
from ledger_modules.reporting.models import (
    BalanceSheetReport,
    ExpenseItem,
    ExpenseReport,
    GroupedReport,
    ProfitLossReport,
    ReportMetadata,
    ReportSection,
    TaxDirection,
    TaxItem,
    TaxSummaryReport,
)

TaxGrouping = Callable[[TaxItem], HierarchyChain]
ExpenseGrouping = Callable[[ExpenseItem], HierarchyChain]

DeclaredGroups = Mapping[AccountType, Sequence[HierarchyChain]]

BALANCE_SHEET_SECTIONS = (AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY)
PROFIT_AND_LOSS_SECTIONS = (AccountType.REVENUE, AccountType.EXPENSE)

TAX_COLLECTED_SECTION = "Tax Collected"
TAX_PAID_SECTION = "Tax Paid"
EXPENSES_SECTION = "Expenses"


# =========================================================================
# Helpers
# =========================================================================


def _require_period(metadata: ReportMetadata) -> None:
    start, end = metadata.period_start, metadata.period_end
    if start is not None and end is not None and end < start:
        raise ValueError(
            f"period end {end.isoformat()} is before start {start.isoformat()}"
        )


def check_sections(accounts: Iterable[AccountWithChain]) -> None:
    """
    Every account type must belong to the report its main group designates.

    Raises:
        SectionMismatchError: e.g. a revenue account under ``balance_sheet``.
    """
    for account in accounts:
        kind = account.main_group
        if account.record.account_type not in kind.account_types:
            raise SectionMismatchError(
                account_id=str(account.record.account_id),
                account_type=account.record.account_type.value,
                main_group=kind.value,
            )


def _make_section(
    name: str,
    entries: Iterable[RollupEntry],
    config: ReportingConfig,
    metadata: ReportMetadata,
    declared: Sequence[HierarchyChain] = (),
) -> ReportSection:
    hierarchy = build_hierarchy(
        name,
        entries,
        include_zero_balances=config.include_zero_balances,
        declared=declared,
    )
    rows = flatten(
        hierarchy,
        display_level=metadata.display_level,
        subtotal_prefix=config.subtotal_prefix,
    )
    return ReportSection(name=name, hierarchy=hierarchy, rows=rows)


def _with_main_label(
    chain: HierarchyChain, kind: MainGroupKind, config: ReportingConfig,
) -> HierarchyChain:
    # MainGroup rows show the configured heading, not the partition name.
    return dataclasses.replace(
        chain, main=GroupRef(key=chain.main.key, name=config.main_group_label(kind)),
    )


def _chart_sections(
    accounts: Sequence[AccountWithChain],
    kind: MainGroupKind,
    section_types: tuple[AccountType, ...],
    config: ReportingConfig,
    metadata: ReportMetadata,
    declared: DeclaredGroups | None,
) -> tuple[ReportSection, ...]:
    check_sections(accounts)
    selected = [a for a in accounts if a.main_group is kind]
    return tuple(
        _make_section(
            config.section_label(account_type),
            (
                dataclasses.replace(
                    a.as_rollup_entry(),
                    chain=_with_main_label(a.chain, kind, config),
                )
                for a in selected
                if a.record.account_type == account_type
            ),
            config,
            metadata,
            [
                _with_main_label(chain, kind, config)
                for chain in (declared or {}).get(account_type, ())
            ],
        )
        for account_type in section_types
    )


def declared_chains(
    directory: GroupDirectory,
    kind: MainGroupKind,
    config: ReportingConfig,
) -> dict[AccountType, list[HierarchyChain]]:
    """
    Chains of every DetailedGroup under ``kind``, keyed by report section.

    A group's section comes from its element group name through
    ``config.element_group_sections``.  Groups whose element name maps to
    no section of ``kind`` cannot be placed and are left out.

    Raises:
        ChainResolutionError: a declared group's own chain is broken.
    """
    result: dict[AccountType, list[HierarchyChain]] = {}
    for record in directory.records(GroupLevel.DETAILED):
        chain = directory.chain_for_detailed(record.id)
        if chain.main.name != kind.value:
            continue
        account_type = config.section_for_element_group(chain.element.name)
        if account_type is None or account_type not in kind.account_types:
            continue
        result.setdefault(account_type, []).append(chain)
    return result


# =========================================================================
# 1. BALANCE SHEET
# =========================================================================


def assemble_balance_sheet(
    accounts: Sequence[AccountWithChain],
    config: ReportingConfig,
    metadata: ReportMetadata,
    declared: DeclaredGroups | None = None,
) -> BalanceSheetReport:
    """
    Build the point-in-time balance sheet.

    Accounts under the ``balance_sheet`` main group are partitioned by
    account type into Assets, Liabilities and Equity.  The accounting
    identity is reported through ``is_balanced``/``difference`` and never
    enforced.

    Raises:
        SectionMismatchError: an account type does not fit its main group.
        ChainResolutionError: an account chain is incomplete.
    """
    assets, liabilities, equity = _chart_sections(
        accounts, MainGroupKind.BALANCE_SHEET, BALANCE_SHEET_SECTIONS,
        config, metadata, declared,
    )
    total_liabilities_and_equity = liabilities.total + equity.total
    difference = assets.total - total_liabilities_and_equity

    return BalanceSheetReport(
        metadata=metadata,
        report_sections=(assets, liabilities, equity),
        total_assets=assets.total,
        total_liabilities=liabilities.total,
        total_equity=equity.total,
        total_liabilities_and_equity=total_liabilities_and_equity,
        difference=difference,
        is_balanced=difference == ZERO,
    )


# =========================================================================
# 2. PROFIT AND LOSS
# =========================================================================


def assemble_profit_loss(
    accounts: Sequence[AccountWithChain],
    config: ReportingConfig,
    metadata: ReportMetadata,
    declared: DeclaredGroups | None = None,
) -> ProfitLossReport:
    """
    Build the period profit and loss statement.

    ``net_income = total_revenue - total_expense``, exact for any sign.
    """
    _require_period(metadata)
    revenue, expenses = _chart_sections(
        accounts, MainGroupKind.PROFIT_AND_LOSS, PROFIT_AND_LOSS_SECTIONS,
        config, metadata, declared,
    )
    return ProfitLossReport(
        metadata=metadata,
        report_sections=(revenue, expenses),
        total_revenue=revenue.total,
        total_expense=expenses.total,
        net_income=revenue.total - expenses.total,
    )


# =========================================================================
# 3. GROUPED REPORTS (generic path)
# =========================================================================


def assemble_grouped_report(
    entries_by_section: Mapping[str, Iterable[RollupEntry]],
    config: ReportingConfig,
    metadata: ReportMetadata,
) -> GroupedReport:
    """
    Roll up and flatten arbitrary ``(value, chain)`` entries.

    Sections appear in mapping order.  The four chain levels can mean
    anything the caller chooses.
    """
    _require_period(metadata)
    return GroupedReport(
        metadata=metadata,
        report_sections=tuple(
            _make_section(name, entries, config, metadata)
            for name, entries in entries_by_section.items()
        ),
    )


def _slug(value: str) -> str:
    return "-".join(value.strip().lower().split())


def default_tax_grouping(item: TaxItem) -> HierarchyChain:
    """Tax -> jurisdiction -> tax type -> tax code."""
    jurisdiction = f"jurisdiction:{_slug(item.jurisdiction)}"
    tax_type = f"{jurisdiction}/type:{_slug(item.tax_type)}"
    return HierarchyChain(
        main=GroupRef(key="tax", name="Tax"),
        element=GroupRef(key=jurisdiction, name=item.jurisdiction),
        sub_element=GroupRef(key=tax_type, name=item.tax_type),
        detailed=GroupRef(key=f"{tax_type}/code:{_slug(item.tax_code)}", name=item.tax_code),
    )


def default_expense_grouping(item: ExpenseItem) -> HierarchyChain:
    """Expense Report -> department -> category -> payee."""
    department = f"department:{_slug(item.department)}"
    category = f"{department}/category:{_slug(item.category)}"
    return HierarchyChain(
        main=GroupRef(key="expense-report", name="Expense Report"),
        element=GroupRef(key=department, name=item.department),
        sub_element=GroupRef(key=category, name=item.category),
        detailed=GroupRef(key=f"{category}/payee:{_slug(item.payee)}", name=item.payee),
    )


def _entry(key: str, label: str, amount: Decimal, chain: HierarchyChain) -> RollupEntry:
    return RollupEntry(key=key, label=label, amount=amount, chain=chain)


def assemble_tax_summary(
    items: Iterable[TaxItem],
    config: ReportingConfig,
    metadata: ReportMetadata,
    grouping: TaxGrouping | None = None,
) -> TaxSummaryReport:
    """
    Tax collected versus tax paid for a period.

    ``net_tax_position = total_tax_collected - total_tax_paid``.
    """
    grouping = grouping or default_tax_grouping
    by_direction: dict[TaxDirection, list[RollupEntry]] = {d: [] for d in TaxDirection}
    for item in items:
        by_direction[TaxDirection(item.direction)].append(
            _entry(item.item_id, item.description, item.amount, grouping(item))
        )

    grouped = assemble_grouped_report(
        {
            TAX_COLLECTED_SECTION: by_direction[TaxDirection.COLLECTED],
            TAX_PAID_SECTION: by_direction[TaxDirection.PAID],
        },
        config,
        metadata,
    )
    collected, paid = grouped.report_sections
    return TaxSummaryReport(
        metadata=metadata,
        report_sections=grouped.report_sections,
        total_tax_collected=collected.total,
        total_tax_paid=paid.total,
        net_tax_position=collected.total - paid.total,
    )


def assemble_expense_report(
    items: Iterable[ExpenseItem],
    config: ReportingConfig,
    metadata: ReportMetadata,
    grouping: ExpenseGrouping | None = None,
) -> ExpenseReport:
    """Expenses for a period in a single section; counts contributing items."""
    grouping = grouping or default_expense_grouping
    entries = [
        _entry(item.item_id, item.description, item.amount, grouping(item))
        for item in items
    ]
    grouped = assemble_grouped_report({EXPENSES_SECTION: entries}, config, metadata)
    (section,) = grouped.report_sections
    item_count = sum(
        len(node.accounts)
        for node in section.hierarchy.walk()
        if isinstance(node, DetailedGroupNode)
    )
    return ExpenseReport(
        metadata=metadata,
        report_sections=grouped.report_sections,
        total_expenses=section.total,
        item_count=item_count,
    )
