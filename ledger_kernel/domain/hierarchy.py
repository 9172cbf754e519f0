"""
Hierarchy -- rollup tree value types.

Responsibility:
    Defines the recursive node shape used at every level of a rolled-up
    report section, the 4-link ancestor chain each contribution carries,
    and the generic ``RollupEntry`` the builder consumes.

Architecture position:
    Kernel > Domain -- pure data definitions with ZERO I/O.

Invariants enforced:
    * One node class per level.  A node only accepts children of the
      level directly beneath it (``HierarchyLevelError`` otherwise), so
      levels can never be mixed.
    * ``children`` is a plain ``dict`` keyed by group identity; iteration
      order is first-insertion order and is the rendering order.
    * Accounts are not a node level.  A ``DetailedGroupNode`` absorbs its
      accounts as ``AccountLeaf`` contributions.
    * All amounts are ``Decimal``.

Failure modes:
    * ``ChainResolutionError`` from ``HierarchyChain.require_complete`` when
      a link is missing or blank.
    * ``HierarchyLevelError`` from ``attach`` on a level mismatch.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from ledger_kernel.exceptions import ChainResolutionError, HierarchyLevelError

ZERO = Decimal("0")


class GroupLevel(str, Enum):
    """Chart-of-accounts group levels, top-down."""

    MAIN = "main"
    ELEMENT = "element"
    SUB_ELEMENT = "sub_element"
    DETAILED = "detailed"

    @property
    def depth(self) -> int:
        """Row level of this group in a flattened report (MainGroup = 0)."""
        return _DEPTHS[self]


_DEPTHS = {
    GroupLevel.MAIN: 0,
    GroupLevel.ELEMENT: 1,
    GroupLevel.SUB_ELEMENT: 2,
    GroupLevel.DETAILED: 3,
}

ACCOUNT_DEPTH = 4


@dataclass(frozen=True)
class GroupRef:
    """Identity (``key``) and display name of one group in a chain."""

    key: str
    name: str


@dataclass(frozen=True)
class HierarchyChain:
    """Resolved 4-level ancestor chain, MainGroup first."""

    main: GroupRef | None
    element: GroupRef | None
    sub_element: GroupRef | None
    detailed: GroupRef | None

    def links(self) -> tuple[tuple[GroupLevel, GroupRef | None], ...]:
        return (
            (GroupLevel.MAIN, self.main),
            (GroupLevel.ELEMENT, self.element),
            (GroupLevel.SUB_ELEMENT, self.sub_element),
            (GroupLevel.DETAILED, self.detailed),
        )

    def require_complete(self, entry_key: str) -> tuple[GroupRef, ...]:
        """Return the four links, raising if any of them is missing."""
        refs: list[GroupRef] = []
        for level, ref in self.links():
            if ref is None or not str(ref.key).strip() or not str(ref.name).strip():
                raise ChainResolutionError(
                    account_id=entry_key,
                    level=level.value,
                    missing_id=None if ref is None else ref.key,
                    reason=f"{level.value} link is missing or blank",
                )
            refs.append(ref)
        return tuple(refs)


@dataclass(frozen=True)
class RollupEntry:
    """
    One leaf contribution to a hierarchy.

    ``key`` identifies the leaf (an account id, a tax line id, ...),
    ``label`` is what the leaf row shows.
    """

    key: str
    label: str
    amount: Decimal
    chain: HierarchyChain


@dataclass(frozen=True)
class AccountLeaf:
    """Terminal contribution folded into a DetailedGroup node."""

    key: str
    label: str
    amount: Decimal


@dataclass(eq=False)
class HierarchyNode:
    """Base node: ``{name, amount, children}`` with insertion-ordered children."""

    key: str
    name: str
    amount: Decimal = ZERO
    children: dict[str, HierarchyNode] = field(default_factory=dict)

    level: ClassVar[GroupLevel | None] = None
    child_type: ClassVar[type[HierarchyNode] | None] = None

    def child(self, ref: GroupRef) -> HierarchyNode:
        """Return the child for ``ref``, creating it on first encounter."""
        node = self.children.get(ref.key)
        if node is None:
            node = self._new_child(ref)
            self.children[ref.key] = node
        return node

    def attach(self, node: HierarchyNode) -> HierarchyNode:
        """Attach an already-built child node, enforcing the level below."""
        if self.child_type is None or type(node) is not self.child_type:
            raise HierarchyLevelError(
                parent_level=_level_name(type(self)),
                child_level=_level_name(type(node)),
            )
        return self.children.setdefault(node.key, node)

    def _new_child(self, ref: GroupRef) -> HierarchyNode:
        if self.child_type is None:
            raise HierarchyLevelError(
                parent_level=_level_name(type(self)), child_level="group",
            )
        return self.child_type(key=ref.key, name=ref.name)

    def walk(self) -> Iterator[HierarchyNode]:
        """Pre-order traversal in insertion order, self first."""
        yield self
        for child in self.children.values():
            yield from child.walk()

    def leaf_total(self) -> Decimal:
        """Independently recompute the sum of all leaf amounts below."""
        return sum((c.leaf_total() for c in self.children.values()), ZERO)


@dataclass(eq=False)
class DetailedGroupNode(HierarchyNode):
    """Deepest group level; absorbs its accounts directly."""

    accounts: list[AccountLeaf] = field(default_factory=list)

    level: ClassVar[GroupLevel | None] = GroupLevel.DETAILED

    def add_leaf(self, leaf: AccountLeaf) -> None:
        self.accounts.append(leaf)

    def leaf_total(self) -> Decimal:
        return sum((leaf.amount for leaf in self.accounts), ZERO)


@dataclass(eq=False)
class SubElementGroupNode(HierarchyNode):
    level: ClassVar[GroupLevel | None] = GroupLevel.SUB_ELEMENT
    child_type: ClassVar[type[HierarchyNode] | None] = DetailedGroupNode


@dataclass(eq=False)
class ElementGroupNode(HierarchyNode):
    level: ClassVar[GroupLevel | None] = GroupLevel.ELEMENT
    child_type: ClassVar[type[HierarchyNode] | None] = SubElementGroupNode


@dataclass(eq=False)
class MainGroupNode(HierarchyNode):
    level: ClassVar[GroupLevel | None] = GroupLevel.MAIN
    child_type: ClassVar[type[HierarchyNode] | None] = ElementGroupNode


@dataclass(eq=False)
class SectionNode(HierarchyNode):
    """Report-section root (e.g. "Assets"); its children are MainGroups."""

    child_type: ClassVar[type[HierarchyNode] | None] = MainGroupNode


def _level_name(node_type: type[HierarchyNode]) -> str:
    if node_type is SectionNode:
        return "section"
    return node_type.level.value if node_type.level is not None else "unknown"
