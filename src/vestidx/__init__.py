"""Rebase-index vesting ledger workbench."""

__version__ = "0.3.0"
