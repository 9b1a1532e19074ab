"""
Ledger Error Taxonomy

Every rejected ledger operation raises one of these. The Command Surface
turns them into failed results; nothing here is allowed to reach the user
as a crash.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for ledger operations."""

    # Short machine-readable tag reported in command results
    error_type = "ledger_error"


class DuplicateNameError(LedgerError):
    """An expense with this name already exists."""

    error_type = "duplicate_name"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Expense named {name} already exists")


class NotFoundError(LedgerError):
    """No expense with this name."""

    error_type = "not_found"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No expense named {name}")


class InvalidDueDateError(LedgerError):
    """Due day is not a valid day of the current month."""

    error_type = "invalid_due_date"

    def __init__(self, day: int, month: int, year: int):
        self.day = day
        self.month = month
        self.year = year
        super().__init__(f"Invalid day {day} for month {month}/{year}")


class InvalidValueError(LedgerError):
    """A field value is structurally invalid (blank name, negative amount)."""

    error_type = "invalid_value"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)
