"""In-memory ledger state and its error taxonomy."""

from expense_ledger.ledger.errors import (
    DuplicateNameError,
    InvalidDueDateError,
    InvalidValueError,
    LedgerError,
    NotFoundError,
)
from expense_ledger.ledger.store import LedgerStore

__all__ = [
    "DuplicateNameError",
    "InvalidDueDateError",
    "InvalidValueError",
    "LedgerError",
    "LedgerStore",
    "NotFoundError",
]
