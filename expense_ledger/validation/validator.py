"""
Due-Date Validation

A due date is a bare day of the month. It is checked against the month
the clock is in when the write happens, not the month the expense will
next fall due in.

Leap years default to the simple divisible-by-4 rule. The full Gregorian
rule (not on centuries unless divisible by 400) is available behind a flag.
"""

from datetime import date
from typing import Callable

THIRTY_ONE_DAY_MONTHS = frozenset({1, 3, 5, 7, 8, 10, 12})
THIRTY_DAY_MONTHS = frozenset({4, 6, 9, 11})
FEBRUARY = 2


def is_leap_year(year: int, gregorian: bool = False) -> bool:
    """Leap-year test; divisible-by-4 unless `gregorian` is set."""
    if gregorian:
        return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)
    return year % 4 == 0


def days_in_month(month: int, year: int, gregorian: bool = False) -> int:
    """Number of days in `month` of `year`."""
    if month in THIRTY_ONE_DAY_MONTHS:
        return 31
    if month in THIRTY_DAY_MONTHS:
        return 30
    if month == FEBRUARY:
        return 29 if is_leap_year(year, gregorian) else 28
    raise ValueError(f"Invalid month: {month}")


def is_valid_due_day(
    day: int,
    month: int,
    year: int,
    gregorian: bool = False,
) -> bool:
    """
    Check a day-of-month against a reference month and year.

    Returns False for an out-of-range month rather than raising, so the
    function is total over its integer inputs.
    """
    if day < 1:
        return False
    try:
        return day <= days_in_month(month, year, gregorian)
    except ValueError:
        return False


class DueDateValidator:
    """
    Validates due days against the current month.

    The clock is injectable so the "current month" can be pinned in tests.
    """

    def __init__(
        self,
        today: Callable[[], date] = date.today,
        gregorian: bool = False,
    ):
        self._today = today
        self._gregorian = gregorian

    def reference(self) -> date:
        """The date validation is currently measured against."""
        return self._today()

    def is_valid(self, day: int) -> bool:
        """Is `day` a valid day of the current month?"""
        now = self._today()
        return is_valid_due_day(day, now.month, now.year, self._gregorian)

    def max_day(self) -> int:
        """Largest valid due day for the current month."""
        now = self._today()
        return days_in_month(now.month, now.year, self._gregorian)
