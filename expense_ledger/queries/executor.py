"""
Ledger Queries

Read-only views over a snapshot: totals, unpaid expenses, what falls due
by a given day.

DESIGN DECISION: Queries run on a snapshot, never on the live store.
The ledger lock is held only for the instant the snapshot is taken.
"""

from typing import Optional

from expense_ledger.models.expense import Expense, LedgerSnapshot, LedgerSummary


class LedgerQueries:
    """Deterministic queries over one snapshot."""

    def __init__(self, snapshot: LedgerSnapshot):
        self._snapshot = snapshot

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self._snapshot

    def find(self, name: str) -> Optional[Expense]:
        """Expense named `name`, or None."""
        return self._snapshot.get(name)

    def paid(self) -> list[Expense]:
        """Paid expenses in ledger order."""
        return [expense for expense in self._snapshot.expenses if expense.paid]

    def unpaid(self) -> list[Expense]:
        """Unpaid expenses in ledger order."""
        return [expense for expense in self._snapshot.expenses if not expense.paid]

    def due_by(self, day: int, include_paid: bool = False) -> list[Expense]:
        """
        Expenses due on or before `day`, earliest first.

        Ties keep ledger order.
        """
        candidates = self._snapshot.expenses if include_paid else self.unpaid()
        matching = [expense for expense in candidates if expense.due_date <= day]
        return sorted(matching, key=lambda expense: expense.due_date)

    def summary(self) -> LedgerSummary:
        """Totals and counts for display."""
        total = self._snapshot.total_cost
        paid = self.paid()
        unpaid = self.unpaid()
        return LedgerSummary(
            income=self._snapshot.income,
            net_worth=self._snapshot.net_worth,
            total_cost=total,
            paid_total=sum(expense.cost for expense in paid),
            unpaid_total=sum(expense.cost for expense in unpaid),
            expense_count=len(self._snapshot.expenses),
            paid_count=len(paid),
            unpaid_names=tuple(expense.name for expense in unpaid),
            net_worth_stale=self._snapshot.net_worth != self._snapshot.income - total,
        )
