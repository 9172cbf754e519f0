"""Ledger kernel: logging, typed errors, chart-of-accounts domain, persistence."""
