"""
Module: ledger_kernel.models.chart_of_accounts
Responsibility: ORM persistence for the chart-of-accounts group hierarchy,
    the accounts themselves, and their pre-aggregated balances.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Four group tables, one per level.  Each non-main group's parent_id
      is a foreign key into the table of the level directly above, so a
      parent of the wrong level cannot be stored.
    - Account codes are unique per tenant (uq_coa_tenant_code).
    - One balance row per (tenant, account, period_start, period_end).
      period_start NULL marks a point-in-time (as-of) balance.

Failure modes:
    - sqlalchemy.exc.IntegrityError on a duplicate code or balance row.

Audit relevance:
    Balances are stored already signed per the account type's normal
    side.  Nothing here derives them from journal postings.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import Base, UUIDString
from ledger_kernel.domain.chart import AccountType


class MainGroup(Base):
    """Top-level partition; name is ``balance_sheet`` or ``profit_and_loss``."""

    __tablename__ = "coa_main_groups"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_coa_main_group_name"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)

    def __repr__(self) -> str:
        return f"<MainGroup {self.name}>"


class ElementGroup(Base):
    __tablename__ = "coa_element_groups"

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    main_group_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("coa_main_groups.id"), nullable=False,
    )


class SubElementGroup(Base):
    __tablename__ = "coa_sub_element_groups"

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    element_group_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("coa_element_groups.id"), nullable=False,
    )


class DetailedGroup(Base):
    __tablename__ = "coa_detailed_groups"

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sub_element_group_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("coa_sub_element_groups.id"), nullable=False,
    )


class ChartAccount(Base):
    """
    Chart of Accounts entry: a leaf under one DetailedGroup.

    detailed_group_id is nullable so that a half-configured account is
    storable; the balance selector surfaces it and chain resolution then
    rejects it instead of dropping it.
    """

    __tablename__ = "chart_of_accounts"
    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_coa_tenant_code"),
        Index("idx_coa_tenant_active", "tenant_id", "is_active"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Account type determines financial statement placement
    account_type: Mapped[AccountType] = mapped_column(String(20), nullable=False)

    detailed_group_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("coa_detailed_groups.id"), nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<ChartAccount {self.code}: {self.name}>"


class AccountBalance(Base):
    """Pre-aggregated balance of one account for one date or period."""

    __tablename__ = "account_balances"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "account_id", "period_start", "period_end",
            name="uq_account_balance_window",
        ),
        Index("idx_account_balance_window", "tenant_id", "period_end"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    account_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("chart_of_accounts.id"), nullable=False,
    )
    period_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    balance: Mapped[Decimal] = mapped_column(nullable=False)
