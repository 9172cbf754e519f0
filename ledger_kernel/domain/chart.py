"""
Chart of Accounts -- account/group records and ancestor-chain resolution.

Responsibility:
    Typed snapshots of what the storage collaborator hands the engine:
    per-account balance records and the four levels of group metadata.
    ``resolve_chain`` walks an account's parent references up to its
    MainGroup and produces the ``HierarchyChain`` the builder consumes.

Architecture position:
    Kernel > Domain -- pure, ZERO I/O.  The reporting module converts
    collaborator payloads into these types (see ``ingestion.py``) and the
    SQL balance selector builds them from ORM rows.

Invariants enforced:
    * Every account resolves to exactly one chain of length 4 ending in a
      MainGroup named ``balance_sheet`` or ``profit_and_loss``.
    * An unresolvable chain is a ``ChainResolutionError``.  Accounts are
      never dropped and never bucketed under a synthetic group.
    * Pre-joined group names on a record must agree with the walked chain.

Failure modes:
    * ``ChainResolutionError`` for a missing group, a parent of the wrong
      level, an unknown MainGroup, or a pre-joined name mismatch.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from ledger_kernel.exceptions import ChainResolutionError
from ledger_kernel.domain.hierarchy import (
    GroupLevel,
    GroupRef,
    HierarchyChain,
    RollupEntry,
)


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class MainGroupKind(str, Enum):
    """The two top-level report partitions."""

    BALANCE_SHEET = "balance_sheet"
    PROFIT_AND_LOSS = "profit_and_loss"

    @property
    def account_types(self) -> frozenset[AccountType]:
        """Account types that may appear under this main group."""
        if self is MainGroupKind.BALANCE_SHEET:
            return frozenset(
                {AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY}
            )
        return frozenset({AccountType.REVENUE, AccountType.EXPENSE})


_PARENT_LEVEL = {
    GroupLevel.DETAILED: GroupLevel.SUB_ELEMENT,
    GroupLevel.SUB_ELEMENT: GroupLevel.ELEMENT,
    GroupLevel.ELEMENT: GroupLevel.MAIN,
}


@dataclass(frozen=True)
class GroupRecord:
    """One chart-of-accounts group: ``{id, name, parent_id}`` at a level."""

    id: str
    name: str
    level: GroupLevel
    parent_id: str | None = None


@dataclass
class GroupDirectory:
    """Group metadata indexed per level by id."""

    _groups: dict[GroupLevel, dict[str, GroupRecord]] = field(
        default_factory=lambda: {level: {} for level in GroupLevel},
    )

    @classmethod
    def from_records(cls, records: Iterable[GroupRecord]) -> GroupDirectory:
        directory = cls()
        for record in records:
            directory.add(record)
        return directory

    def add(self, record: GroupRecord) -> None:
        self._groups[record.level][str(record.id)] = record

    def get(self, level: GroupLevel, group_id: str | None) -> GroupRecord | None:
        if group_id is None:
            return None
        return self._groups[level].get(str(group_id))

    def records(self, level: GroupLevel) -> tuple[GroupRecord, ...]:
        """Records of one level in insertion order."""
        return tuple(self._groups[level].values())

    def __len__(self) -> int:
        return sum(len(groups) for groups in self._groups.values())

    def chain_for_detailed(
        self, detailed_id: str, subject: str | None = None,
    ) -> HierarchyChain:
        """
        Walk parent references from a DetailedGroup up to its MainGroup.

        ``subject`` names the account (or group) being resolved in any
        error raised; it defaults to the detailed group id.
        """
        subject = subject or str(detailed_id)
        refs: dict[GroupLevel, GroupRef] = {}
        level = GroupLevel.DETAILED
        group_id: str | None = str(detailed_id)
        while True:
            record = self.get(level, group_id)
            if record is None:
                raise ChainResolutionError(
                    account_id=subject, level=level.value, missing_id=group_id,
                )
            refs[level] = GroupRef(key=str(record.id), name=record.name)
            if level is GroupLevel.MAIN:
                break
            if record.parent_id is None:
                raise ChainResolutionError(
                    account_id=subject,
                    level=_PARENT_LEVEL[level].value,
                    reason=f"{level.value} group {record.id!r} has no parent",
                )
            level = _PARENT_LEVEL[level]
            group_id = str(record.parent_id)

        main_name = refs[GroupLevel.MAIN].name
        if main_name not in {kind.value for kind in MainGroupKind}:
            raise ChainResolutionError(
                account_id=subject,
                level=GroupLevel.MAIN.value,
                missing_id=refs[GroupLevel.MAIN].key,
                reason=f"main group {main_name!r} is not a report partition",
            )

        return HierarchyChain(
            main=refs[GroupLevel.MAIN],
            element=refs[GroupLevel.ELEMENT],
            sub_element=refs[GroupLevel.SUB_ELEMENT],
            detailed=refs[GroupLevel.DETAILED],
        )


@dataclass(frozen=True)
class AccountBalanceRecord:
    """
    Pre-joined account balance supplied by the storage collaborator.

    ``balance`` is already signed per the account type's normal side and
    already computed for the requested date or period.
    """

    account_id: str
    account_code: str
    account_name: str
    account_type: AccountType
    balance: Decimal
    detailed_group_id: str | None
    sub_element_group_name: str | None = None
    element_group_name: str | None = None
    main_group_name: str | None = None

    @property
    def label(self) -> str:
        return f"{self.account_name} ({self.account_code})"


@dataclass(frozen=True)
class AccountWithChain:
    """An account balance together with its resolved ancestor chain."""

    record: AccountBalanceRecord
    chain: HierarchyChain

    @property
    def main_group(self) -> MainGroupKind:
        return MainGroupKind(self.chain.main.name)

    def as_rollup_entry(self) -> RollupEntry:
        return RollupEntry(
            key=str(self.record.account_id),
            label=self.record.label,
            amount=self.record.balance,
            chain=self.chain,
        )


def resolve_chain(
    record: AccountBalanceRecord,
    directory: GroupDirectory,
) -> AccountWithChain:
    """
    Resolve one account's 4-level chain.

    Preconditions: ``record.balance`` is a validated Decimal.
    Postconditions: Returns an ``AccountWithChain`` whose chain ends at a
        ``balance_sheet`` or ``profit_and_loss`` MainGroup.
    Raises:
        ChainResolutionError: missing group at any level, or a pre-joined
            name that disagrees with the walked chain.
    """
    account_id = str(record.account_id)
    if record.detailed_group_id is None:
        raise ChainResolutionError(
            account_id=account_id,
            level=GroupLevel.DETAILED.value,
            reason="account has no detailed group",
        )

    chain = directory.chain_for_detailed(record.detailed_group_id, account_id)

    prejoined: Mapping[GroupLevel, str | None] = {
        GroupLevel.SUB_ELEMENT: record.sub_element_group_name,
        GroupLevel.ELEMENT: record.element_group_name,
        GroupLevel.MAIN: record.main_group_name,
    }
    walked = dict(chain.links())
    for level, name in prejoined.items():
        if name is not None and name != walked[level].name:
            raise ChainResolutionError(
                account_id=account_id,
                level=level.value,
                missing_id=walked[level].key,
                reason=(
                    f"pre-joined {level.value} name {name!r} does not match "
                    f"resolved group {walked[level].name!r}"
                ),
            )

    return AccountWithChain(record=record, chain=chain)


def resolve_all(
    records: Iterable[AccountBalanceRecord],
    directory: GroupDirectory,
) -> list[AccountWithChain]:
    """Resolve every record, preserving input order; first failure raises."""
    return [resolve_chain(record, directory) for record in records]
