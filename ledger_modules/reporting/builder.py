"""
HierarchyBuilder -- incremental rollup tree construction.

Responsibility:
    Turns a flat sequence of ``RollupEntry`` contributions, each carrying
    a 4-level ancestor chain, into one ``SectionNode`` tree whose every
    node holds the rolled-up amount of the leaves beneath it.

Architecture position:
    Modules > Reporting -- pure, ZERO I/O.  Used by the assembler once per
    report section.  Agnostic to what the four levels mean: the chart of
    accounts, tax jurisdictions and expense categories all feed it.

Invariants enforced:
    * Child order is first-insertion order.
    * An entry's amount is added to the section root and to every node on
      its path, DetailedGroup included, in one pass.
    * Entries with an amount of exactly zero are skipped entirely unless
      ``include_zero_balances`` is set: no leaf, no node creation.
    * Same entry list -> identical tree.  Same entry set in another order
      -> identical totals.

Failure modes:
    * ``ChainResolutionError`` for an entry with a missing or blank link.
      The builder is left unchanged by the failing entry, and callers
      abandon the report.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import cast

from ledger_kernel.domain.hierarchy import (
    ZERO,
    AccountLeaf,
    DetailedGroupNode,
    HierarchyChain,
    HierarchyNode,
    RollupEntry,
    SectionNode,
)
from ledger_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.builder")


class HierarchyBuilder:
    """
    Accumulates entries into a section hierarchy.

    Usage:
        builder = HierarchyBuilder("Assets")
        builder.extend(entries)
        root = builder.build()
    """

    def __init__(self, section_name: str, *, include_zero_balances: bool = False):
        self._root = SectionNode(key=section_name, name=section_name)
        self._include_zero = include_zero_balances
        self._added = 0
        self._skipped_zero = 0

    @property
    def section_name(self) -> str:
        return self._root.name

    def add(self, entry: RollupEntry) -> None:
        """Fold one contribution into the tree."""
        refs = entry.chain.require_complete(entry.key)
        if entry.amount == ZERO and not self._include_zero:
            self._skipped_zero += 1
            return

        path: list[HierarchyNode] = [self._root]
        node: HierarchyNode = self._root
        for ref in refs:
            node = node.child(ref)
            path.append(node)

        for ancestor in path:
            ancestor.amount += entry.amount
        cast(DetailedGroupNode, node).add_leaf(
            AccountLeaf(key=entry.key, label=entry.label, amount=entry.amount)
        )
        self._added += 1

    def extend(self, entries: Iterable[RollupEntry]) -> None:
        for entry in entries:
            self.add(entry)

    def declare(self, chain: HierarchyChain) -> None:
        """Register a group path with no contribution so it renders when empty."""
        node: HierarchyNode = self._root
        for ref in chain.require_complete("<declared group>"):
            node = node.child(ref)

    def build(self) -> SectionNode:
        logger.debug(
            "hierarchy_built",
            extra={
                "section": self._root.name,
                "entries_added": self._added,
                "zero_entries_skipped": self._skipped_zero,
                "total": self._root.amount,
            },
        )
        return self._root


def build_hierarchy(
    section_name: str,
    entries: Iterable[RollupEntry],
    *,
    include_zero_balances: bool = False,
    declared: Iterable[HierarchyChain] = (),
) -> SectionNode:
    """
    Build one section hierarchy in a single call.

    Entries are folded first, so declared groups never change the
    first-insertion order established by contributing entries.
    """
    builder = HierarchyBuilder(section_name, include_zero_balances=include_zero_balances)
    builder.extend(entries)
    for chain in declared:
        builder.declare(chain)
    return builder.build()
