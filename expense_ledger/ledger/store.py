"""
Ledger Store

Owns the one in-memory ledger: the ordered expense records, the income
figure and the derived net worth.

CONCURRENCY: A single lock guards the whole ledger. Every public method
holds it for its full duration and does only in-memory work while it
does - no I/O and no logging under the lock.

INVARIANTS:
- Expense names are unique.
- Every due day written through add/edit is valid for the current month.
- A failed operation leaves the ledger unchanged.
- After recompute_net_worth(), net_worth == income - sum(cost).
- income - sum(cost) is always a finite number.
"""

import math
import threading
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError

from expense_ledger.ledger.errors import (
    DuplicateNameError,
    InvalidDueDateError,
    InvalidValueError,
    NotFoundError,
)
from expense_ledger.models.expense import Expense, LedgerSnapshot
from expense_ledger.validation import DueDateValidator

T = TypeVar("T")


def _build_expense(**fields) -> Expense:
    """Construct a record, reporting schema failures as InvalidValueError."""
    try:
        return Expense(**fields)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise InvalidValueError(
            f"Invalid {field or 'expense'}: {first.get('msg')}",
            field=field,
        ) from e


def _check_amount(value, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidValueError(f"{field} must be a number", field=field)
    if not math.isfinite(value) or value < 0:
        raise InvalidValueError(f"{field} must be a non-negative number", field=field)
    return float(value)


def _check_net_worth(income: float, expenses) -> float:
    net_worth = income - sum(expense.cost for expense in expenses)
    if not math.isfinite(net_worth):
        raise InvalidValueError("Amounts are too large: net worth would not be finite", field="cost")
    return net_worth


class LedgerStore:
    """
    Race-free holder of the ledger state.

    Create one per process, seeded from the persisted snapshot, and pass it
    by reference to whatever exposes the Command Surface.
    """

    def __init__(
        self,
        initial: Optional[LedgerSnapshot] = None,
        validator: Optional[DueDateValidator] = None,
    ):
        self._lock = threading.Lock()
        self._validator = validator or DueDateValidator()
        self._expenses: list[Expense] = []
        self._income = 0.0
        self._net_worth = 0.0
        self._apply(initial or LedgerSnapshot.empty())

    # -------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # -------------------------------------------------------------------

    def _apply(self, snapshot: LedgerSnapshot) -> None:
        self._expenses = list(snapshot.expenses)
        self._income = snapshot.income
        self._net_worth = snapshot.net_worth

    def _index_of(self, name: str) -> Optional[int]:
        for index, expense in enumerate(self._expenses):
            if expense.name == name:
                return index
        return None

    def _require_index(self, name: str) -> int:
        index = self._index_of(name)
        if index is None:
            raise NotFoundError(name)
        return index

    def _check_due_date(self, day) -> int:
        if isinstance(day, bool) or not isinstance(day, int):
            raise InvalidValueError("due_date must be an integer day of the month", field="due_date")
        if not self._validator.is_valid(day):
            now = self._validator.reference()
            raise InvalidDueDateError(day, now.month, now.year)
        return day

    def _locked(self, operation: Callable[[], T]) -> T:
        with self._lock:
            return operation()

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------

    def add(self, name: str, due_date: int, cost: Optional[float] = None) -> Expense:
        """
        Append a new unpaid expense.

        Raises:
            InvalidDueDateError: due_date is not a day of the current month
            DuplicateNameError: an expense with this name exists
            InvalidValueError: blank name, negative cost, or a cost too large
                for net worth to stay finite
        """
        def operation() -> Expense:
            day = self._check_due_date(due_date)
            if self._index_of(name) is not None:
                raise DuplicateNameError(name)
            expense = _build_expense(
                name=name,
                cost=0.0 if cost is None else cost,
                paid=False,
                due_date=day,
            )
            _check_net_worth(self._income, [*self._expenses, expense])
            self._expenses.append(expense)
            return expense

        return self._locked(operation)

    def remove(self, name: str) -> Expense:
        """Delete an expense, keeping the order of the rest."""
        def operation() -> Expense:
            return self._expenses.pop(self._require_index(name))

        return self._locked(operation)

    def edit(
        self,
        name: str,
        new_name: Optional[str] = None,
        new_cost: Optional[float] = None,
        new_due_date: Optional[int] = None,
    ) -> Expense:
        """
        Update the supplied fields of an expense. `paid` is never touched.

        Raises:
            NotFoundError: no expense named `name`
            InvalidDueDateError: new_due_date is not a day of the current month
            DuplicateNameError: new_name belongs to another expense
            InvalidValueError: blank name or negative cost, or a cost too large
                for net worth to stay finite
        """
        def operation() -> Expense:
            index = self._require_index(name)
            current = self._expenses[index]
            changes = {}
            if new_due_date is not None:
                changes["due_date"] = self._check_due_date(new_due_date)
            if new_name is not None and new_name != current.name:
                if self._index_of(new_name) is not None:
                    raise DuplicateNameError(new_name)
                changes["name"] = new_name
            if new_cost is not None:
                changes["cost"] = new_cost
            updated = _build_expense(**{**current.model_dump(), **changes})
            if "cost" in changes:
                _check_net_worth(
                    self._income,
                    [updated if i == index else e for i, e in enumerate(self._expenses)],
                )
            self._expenses[index] = updated
            return updated

        return self._locked(operation)

    def pay(self, name: str) -> bool:
        """Toggle the paid flag; returns the new value."""
        def operation() -> bool:
            index = self._require_index(name)
            current = self._expenses[index]
            self._expenses[index] = current.model_copy(update={"paid": not current.paid})
            return not current.paid

        return self._locked(operation)

    def reset_paid(self) -> int:
        """Mark every expense unpaid; returns how many records there are."""
        def operation() -> int:
            self._expenses = [
                expense if not expense.paid else expense.model_copy(update={"paid": False})
                for expense in self._expenses
            ]
            return len(self._expenses)

        return self._locked(operation)

    def set_income(self, value: float) -> float:
        """Overwrite income. Net worth is left stale."""
        amount = _check_amount(value, "income")

        def operation() -> float:
            self._income = amount
            return amount

        return self._locked(operation)

    def recompute_net_worth(self) -> float:
        """Set net_worth = income - sum(cost) and return it."""
        def operation() -> float:
            self._net_worth = _check_net_worth(self._income, self._expenses)
            return self._net_worth

        return self._locked(operation)

    def restore(self, snapshot: LedgerSnapshot) -> None:
        """Replace the whole ledger with a previously taken snapshot."""
        self._locked(lambda: self._apply(snapshot))

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------

    def snapshot(self) -> LedgerSnapshot:
        """Immutable copy of the full ledger state."""
        income, net_worth, expenses = self._locked(
            lambda: (self._income, self._net_worth, tuple(self._expenses))
        )
        return LedgerSnapshot(income=income, net_worth=net_worth, expenses=expenses)

    def get(self, name: str) -> Expense:
        """Return the expense named `name`."""
        return self._locked(lambda: self._expenses[self._require_index(name)])

    def __contains__(self, name: object) -> bool:
        return self._locked(lambda: isinstance(name, str) and self._index_of(name) is not None)

    def __len__(self) -> int:
        return self._locked(lambda: len(self._expenses))
