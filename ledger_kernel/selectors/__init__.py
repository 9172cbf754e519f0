"""Read-only selectors over the persistence boundary."""

from ledger_kernel.selectors.balance_selector import SqlBalanceSource

__all__ = ["SqlBalanceSource"]
