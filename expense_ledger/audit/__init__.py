"""Structured event logging package."""

from expense_ledger.audit.logger import LedgerEventLogger, configure_logging

__all__ = ["LedgerEventLogger", "configure_logging"]
