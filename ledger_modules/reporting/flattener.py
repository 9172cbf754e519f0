"""
Flattener -- hierarchy to ordered report rows.

Responsibility:
    Walks a completed section hierarchy depth-first and emits the ordered
    ``ReportRow`` sequence that the on-screen table, the spreadsheet
    exporter and the print exporter all consume unchanged.

Architecture position:
    Modules > Reporting -- pure, ZERO I/O.  The only place that decides
    row order, indentation and subtotal placement.

Invariants enforced:
    * Children are visited in stored (first-insertion) order.
    * Groups above DetailedGroup: header row (blank amount), children,
      then ``"<prefix> <name>"`` at the same level with ``is_subtotal``.
    * A DetailedGroup is one row carrying its amount, followed by its
      account rows one level deeper.  It has no separate subtotal.
    * The section root emits no header and closes with exactly one
      grand-total row at level 0, whatever the display level.
    * An empty group still emits its header and a zero subtotal.

Failure modes:
    None.  The tree shape is guaranteed by the node types.
"""

from __future__ import annotations

from collections.abc import Iterator

from ledger_kernel.domain.hierarchy import (
    ACCOUNT_DEPTH,
    DetailedGroupNode,
    HierarchyNode,
    SectionNode,
)
from ledger_modules.reporting.models import DisplayLevel, ReportRow


def flatten(
    root: SectionNode,
    *,
    display_level: DisplayLevel = DisplayLevel.ALL,
    subtotal_prefix: str = "Total",
) -> tuple[ReportRow, ...]:
    """
    Flatten one section hierarchy into rows.

    With ``DisplayLevel.ALL`` the full indented layout is produced.  Any
    other level collapses the section to one level-0 row per node at that
    depth (accounts for ``ACCOUNT``), in pre-order, each carrying its
    rolled-up amount.
    """
    display_level = DisplayLevel(display_level)
    if display_level is DisplayLevel.ALL:
        rows = [
            row
            for child in root.children.values()
            for row in _expand(child, subtotal_prefix)
        ]
    else:
        rows = list(_collapse(root, display_level.depth))
    rows.append(
        ReportRow(
            level=0,
            label=f"{subtotal_prefix} {root.name}",
            amount=root.amount,
            is_subtotal=True,
        )
    )
    return tuple(rows)


def _expand(node: HierarchyNode, prefix: str) -> Iterator[ReportRow]:
    depth = node.level.depth
    if isinstance(node, DetailedGroupNode):
        yield ReportRow(level=depth, label=node.name, amount=node.amount)
        for leaf in node.accounts:
            yield ReportRow(level=ACCOUNT_DEPTH, label=leaf.label, amount=leaf.amount)
        return

    yield ReportRow(level=depth, label=node.name, amount=None)
    for child in node.children.values():
        yield from _expand(child, prefix)
    yield ReportRow(
        level=depth,
        label=f"{prefix} {node.name}",
        amount=node.amount,
        is_subtotal=True,
    )


def _collapse(root: SectionNode, depth: int) -> Iterator[ReportRow]:
    for node in root.walk():
        if node is root:
            continue
        if depth == ACCOUNT_DEPTH:
            if isinstance(node, DetailedGroupNode):
                for leaf in node.accounts:
                    yield ReportRow(level=0, label=leaf.label, amount=leaf.amount)
        elif node.level.depth == depth:
            yield ReportRow(level=0, label=node.name, amount=node.amount)

