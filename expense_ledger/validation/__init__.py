"""Due-date validation package."""

from expense_ledger.validation.validator import (
    DueDateValidator,
    days_in_month,
    is_leap_year,
    is_valid_due_day,
)

__all__ = [
    "DueDateValidator",
    "days_in_month",
    "is_leap_year",
    "is_valid_due_day",
]
