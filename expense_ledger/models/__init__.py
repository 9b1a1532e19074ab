"""
Data Models Package

This package contains all Pydantic models used by the expense ledger.
Everything held in memory or written to disk conforms to these schemas.
"""

from expense_ledger.models.expense import (
    MAX_DAY_OF_MONTH,
    CommandResult,
    Expense,
    LedgerSnapshot,
    LedgerSummary,
)
from expense_ledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventSeverity,
    LedgerEventType,
)

__all__ = [
    # Ledger models
    "MAX_DAY_OF_MONTH",
    "CommandResult",
    "Expense",
    "LedgerSnapshot",
    "LedgerSummary",
    # Event models
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventSeverity",
    "LedgerEventType",
]
