"""
Ledger Modules.

Thin orchestration layers over the Ledger Kernel.

Modules:
- Reporting: hierarchical balance sheet, profit and loss, tax summary
  and expense reports with spreadsheet, PDF and print exports
"""
