"""
Module: ledger_kernel.selectors.balance_selector
Responsibility: SQL implementation of the balance retrieval capability.
    Reads the four chart-of-accounts group tables and the pre-aggregated
    ``account_balances`` table for one tenant and one window.
Architecture position: Kernel > Selectors.  May import from models/ and
    domain/.  Read-only.

Invariants enforced:
    - Tenant scoping: every query filters on tenant_id.
    - Exact window match.  A point-in-time request reads rows with
      ``period_start IS NULL`` and ``period_end == as_of``; a period request
      reads rows with exactly that start and end.
    - Balances are read as stored; nothing here sums journal lines.
    - Inactive accounts are excluded.
    - Records come back ordered by account code, which fixes the
      first-insertion order of the report.

Failure modes:
    - InvalidAccountTypeError for a stored account_type outside the enum.
    - Accounts whose groups are missing are still returned (with the
      pre-joined names left None); chain resolution rejects them later.
"""

from sqlalchemy import select

from ledger_kernel.domain.balances import BalanceSnapshot, BalanceSource, BalanceWindow
from ledger_kernel.domain.chart import (
    AccountBalanceRecord,
    AccountType,
    GroupDirectory,
    GroupRecord,
)
from ledger_kernel.domain.hierarchy import GroupLevel
from ledger_kernel.exceptions import InvalidAccountTypeError
from ledger_kernel.logging_config import get_logger
from ledger_kernel.models.chart_of_accounts import (
    AccountBalance,
    ChartAccount,
    DetailedGroup,
    ElementGroup,
    MainGroup,
    SubElementGroup,
)
from ledger_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.balance")

# (model, level, parent column name)
_GROUP_TABLES = (
    (MainGroup, GroupLevel.MAIN, None),
    (ElementGroup, GroupLevel.ELEMENT, "main_group_id"),
    (SubElementGroup, GroupLevel.SUB_ELEMENT, "element_group_id"),
    (DetailedGroup, GroupLevel.DETAILED, "sub_element_group_id"),
)


class SqlBalanceSource(BaseSelector, BalanceSource):
    """
    Balance source backed by the ORM tables.

    Usage:
        with session_scope() as session:
            source = SqlBalanceSource(session)
            service = ReportingService(source)
            report = service.balance_sheet("tenant-1", date(2024, 12, 31))
    """

    def group_directory(self, tenant_id: str) -> GroupDirectory:
        """All groups of a tenant, each level ordered by name."""
        directory = GroupDirectory()
        for model, level, parent_attr in _GROUP_TABLES:
            rows = self.session.execute(
                select(model)
                .where(model.tenant_id == tenant_id)
                .order_by(model.name, model.id)
            ).scalars()
            for row in rows:
                parent_id = getattr(row, parent_attr) if parent_attr else None
                directory.add(
                    GroupRecord(
                        id=str(row.id),
                        name=row.name,
                        level=level,
                        parent_id=None if parent_id is None else str(parent_id),
                    )
                )
        return directory

    def account_balances(
        self, tenant_id: str, window: BalanceWindow,
    ) -> tuple[AccountBalanceRecord, ...]:
        """Pre-joined balance records for the exact window."""
        query = (
            select(
                ChartAccount,
                AccountBalance.balance,
                SubElementGroup.name,
                ElementGroup.name,
                MainGroup.name,
            )
            .join(AccountBalance, AccountBalance.account_id == ChartAccount.id)
            .outerjoin(DetailedGroup, DetailedGroup.id == ChartAccount.detailed_group_id)
            .outerjoin(
                SubElementGroup,
                SubElementGroup.id == DetailedGroup.sub_element_group_id,
            )
            .outerjoin(ElementGroup, ElementGroup.id == SubElementGroup.element_group_id)
            .outerjoin(MainGroup, MainGroup.id == ElementGroup.main_group_id)
            .where(ChartAccount.tenant_id == tenant_id)
            .where(AccountBalance.tenant_id == tenant_id)
            .where(ChartAccount.is_active.is_(True))
            .where(AccountBalance.period_end == window.end)
        )
        if window.start is None:
            query = query.where(AccountBalance.period_start.is_(None))
        else:
            query = query.where(AccountBalance.period_start == window.start)
        query = query.order_by(ChartAccount.code)

        records = []
        for account, balance, sub_name, element_name, main_name in self.session.execute(query):
            try:
                account_type = AccountType(account.account_type)
            except ValueError:
                raise InvalidAccountTypeError(str(account.id), account.account_type) from None
            records.append(
                AccountBalanceRecord(
                    account_id=str(account.id),
                    account_code=account.code,
                    account_name=account.name,
                    account_type=account_type,
                    balance=balance,
                    detailed_group_id=(
                        None if account.detailed_group_id is None
                        else str(account.detailed_group_id)
                    ),
                    sub_element_group_name=sub_name,
                    element_group_name=element_name,
                    main_group_name=main_name,
                )
            )
        return tuple(records)

    def fetch_balances(
        self, tenant_id: str, window: BalanceWindow,
    ) -> BalanceSnapshot:
        snapshot = BalanceSnapshot(
            records=self.account_balances(tenant_id, window),
            groups=self.group_directory(tenant_id),
        )
        logger.debug(
            "balances_fetched",
            extra={
                "tenant_id": tenant_id,
                "account_count": len(snapshot.records),
                "group_count": len(snapshot.groups),
                **window.describe(),
            },
        )
        return snapshot
