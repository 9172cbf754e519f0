"""ORM models for the chart of accounts and account balances."""

from ledger_kernel.models.chart_of_accounts import (
    AccountBalance,
    ChartAccount,
    DetailedGroup,
    ElementGroup,
    MainGroup,
    SubElementGroup,
)

__all__ = [
    "AccountBalance",
    "ChartAccount",
    "DetailedGroup",
    "ElementGroup",
    "MainGroup",
    "SubElementGroup",
]
