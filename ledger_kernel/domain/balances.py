"""
Balance retrieval capability.

Responsibility:
    The injected boundary through which report assembly receives its
    input: pre-aggregated per-account balances for one tenant and one
    window, plus the chart-of-accounts group metadata needed to resolve
    ancestor chains.

Architecture position:
    Kernel > Domain.  ``BalanceSource`` is an interface with one method.
    ``InMemoryBalanceSource`` serves synthetic data for tests and scripts;
    ``ledger_kernel.selectors.balance_selector.SqlBalanceSource`` reads the
    persisted tables.

Invariants enforced:
    * A window is either a point in time (``as_of``) or an inclusive
      period (``start``..``end``); ``end < start`` is rejected.
    * Sources never compute balances from journal postings.

Failure modes:
    * ``ValueError`` on an inverted period.
    * Whatever the concrete source raises on I/O failure propagates; the
      caller decides on retries and timeouts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from ledger_kernel.domain.chart import AccountBalanceRecord, GroupDirectory


@dataclass(frozen=True)
class BalanceWindow:
    """Point-in-time snapshot (``start is None``) or inclusive period."""

    end: date
    start: date | None = None

    def __post_init__(self):
        if self.start is not None and self.end < self.start:
            raise ValueError(
                f"period end {self.end.isoformat()} is before "
                f"start {self.start.isoformat()}"
            )

    @classmethod
    def as_of(cls, as_of_date: date) -> BalanceWindow:
        return cls(end=as_of_date)

    @classmethod
    def period(cls, start_date: date, end_date: date) -> BalanceWindow:
        return cls(end=end_date, start=start_date)

    @property
    def is_point_in_time(self) -> bool:
        return self.start is None

    def describe(self) -> dict[str, str]:
        if self.start is None:
            return {"as_of_date": self.end.isoformat()}
        return {
            "start_date": self.start.isoformat(),
            "end_date": self.end.isoformat(),
        }


@dataclass(frozen=True)
class BalanceSnapshot:
    """Account balances for one tenant and window, plus group metadata."""

    records: tuple[AccountBalanceRecord, ...]
    groups: GroupDirectory = field(default_factory=GroupDirectory)


class BalanceSource(ABC):
    """
    Fetches balances for a tenant and window.

    Contract:
        Returned records are scoped to ``tenant_id`` and carry balances
        already computed for ``window``.  Order of records is preserved by
        the engine and drives first-insertion ordering of the report.
    """

    @abstractmethod
    def fetch_balances(
        self, tenant_id: str, window: BalanceWindow,
    ) -> BalanceSnapshot:
        ...


class InMemoryBalanceSource(BalanceSource):
    """
    Balance source over in-memory snapshots.

    Snapshots are registered per tenant and window.  A request for a
    window with nothing registered returns an empty snapshot that still
    carries the tenant's group metadata.
    """

    def __init__(self):
        self._groups: dict[str, GroupDirectory] = {}
        self._records: dict[tuple[str, BalanceWindow], tuple[AccountBalanceRecord, ...]] = {}

    def set_groups(self, tenant_id: str, groups: GroupDirectory) -> None:
        self._groups[tenant_id] = groups

    def put(
        self,
        tenant_id: str,
        window: BalanceWindow,
        records: Iterable[AccountBalanceRecord],
    ) -> None:
        self._records[(tenant_id, window)] = tuple(records)

    def fetch_balances(
        self, tenant_id: str, window: BalanceWindow,
    ) -> BalanceSnapshot:
        return BalanceSnapshot(
            records=self._records.get((tenant_id, window), ()),
            groups=self._groups.get(tenant_id, GroupDirectory()),
        )
