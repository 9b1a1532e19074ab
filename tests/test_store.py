"""Tests for the in-memory Ledger Store."""

import threading

import pytest

from expense_ledger.ledger import (
    DuplicateNameError,
    InvalidDueDateError,
    InvalidValueError,
    LedgerStore,
    NotFoundError,
)
from expense_ledger.models.expense import Expense, LedgerSnapshot


class TestAdd:
    """Tests for LedgerStore.add."""

    def test_add_defaults(self, store):
        """A new expense is unpaid and costs 0 when no cost is given."""
        store.add("Rent", due_date=1)
        expense = store.get("Rent")
        assert expense.paid is False
        assert expense.cost == 0.0
        assert expense.due_date == 1

    def test_add_appends_in_order(self, store):
        """Insertion order is preserved."""
        store.add("Rent", due_date=1, cost=1200)
        store.add("Internet", due_date=15, cost=60)
        store.add("Water", due_date=20, cost=30)
        names = [expense.name for expense in store.snapshot().expenses]
        assert names == ["Rent", "Internet", "Water"]

    def test_add_duplicate_name(self, store):
        """A duplicate name fails and leaves the ledger unchanged."""
        store.add("Rent", due_date=1, cost=1200)
        before = store.snapshot()
        with pytest.raises(DuplicateNameError, match="Rent already exists"):
            store.add("Rent", due_date=5, cost=10)
        assert store.snapshot() == before

    @pytest.mark.parametrize("day", [0, 32, -1])
    def test_add_invalid_due_date(self, store, day):
        """Days outside the month are rejected."""
        with pytest.raises(InvalidDueDateError):
            store.add("Rent", due_date=day)
        assert len(store) == 0

    def test_add_february_thirtieth_non_leap(self, validator_for):
        """Day 30 is invalid in a non-leap February."""
        store = LedgerStore(validator=validator_for(2023, 2))
        with pytest.raises(InvalidDueDateError) as excinfo:
            store.add("Rent", due_date=30)
        assert excinfo.value.month == 2
        assert excinfo.value.year == 2023

    def test_add_february_twenty_ninth_leap(self, validator_for):
        """Day 29 is valid in February of a year divisible by 4."""
        store = LedgerStore(validator=validator_for(2024, 2))
        store.add("Rent", due_date=29)
        assert store.get("Rent").due_date == 29

    def test_add_non_integer_due_date(self, store):
        """Due dates must be integers."""
        with pytest.raises(InvalidValueError):
            store.add("Rent", due_date="5")
        with pytest.raises(InvalidValueError):
            store.add("Rent", due_date=True)

    def test_add_negative_cost(self, store):
        """Negative costs are rejected without inserting anything."""
        with pytest.raises(InvalidValueError) as excinfo:
            store.add("Rent", due_date=1, cost=-5)
        assert excinfo.value.field == "cost"
        assert len(store) == 0

    def test_add_blank_name(self, store):
        with pytest.raises(InvalidValueError):
            store.add("  ", due_date=1)

    def test_add_leaves_net_worth_stale(self, store):
        """Adding does not recompute net worth by itself."""
        store.set_income(1000)
        store.recompute_net_worth()
        store.add("Rent", due_date=1, cost=300)
        assert store.snapshot().net_worth == 1000


class TestRemove:
    """Tests for LedgerStore.remove."""

    def test_remove_preserves_order(self, store):
        store.add("Rent", due_date=1)
        store.add("Internet", due_date=15)
        store.add("Water", due_date=20)
        removed = store.remove("Internet")
        assert removed.name == "Internet"
        names = [expense.name for expense in store.snapshot().expenses]
        assert names == ["Rent", "Water"]

    def test_remove_twice(self, store):
        """The second removal of the same name fails with NotFound."""
        store.add("Rent", due_date=1)
        store.remove("Rent")
        with pytest.raises(NotFoundError, match="No expense named Rent"):
            store.remove("Rent")

    def test_remove_missing(self, store):
        with pytest.raises(NotFoundError):
            store.remove("Gym")


class TestEdit:
    """Tests for LedgerStore.edit."""

    def test_edit_updates_only_supplied_fields(self, store):
        store.add("Rent", due_date=1, cost=1200)
        store.edit("Rent", new_cost=1300)
        expense = store.get("Rent")
        assert expense.cost == 1300
        assert expense.due_date == 1

    def test_edit_does_not_touch_paid(self, store):
        store.add("Rent", due_date=1, cost=1200)
        store.pay("Rent")
        store.edit("Rent", new_cost=1000, new_due_date=3)
        assert store.get("Rent").paid is True

    def test_edit_rename_keeps_position(self, store):
        store.add("Rent", due_date=1)
        store.add("Internet", due_date=15)
        store.edit("Rent", new_name="Mortgage")
        names = [expense.name for expense in store.snapshot().expenses]
        assert names == ["Mortgage", "Internet"]
        assert "Rent" not in store

    def test_edit_rename_to_same_name(self, store):
        """Renaming onto itself is not a duplicate."""
        store.add("Rent", due_date=1)
        store.edit("Rent", new_name="Rent", new_cost=5)
        assert store.get("Rent").cost == 5

    def test_edit_rename_collision(self, store):
        """Renaming onto another record's name fails and changes nothing."""
        store.add("Rent", due_date=1, cost=1200)
        store.add("Internet", due_date=15, cost=60)
        before = store.snapshot()
        with pytest.raises(DuplicateNameError):
            store.edit("Internet", new_name="Rent", new_cost=70)
        assert store.snapshot() == before

    def test_edit_missing(self, store):
        with pytest.raises(NotFoundError):
            store.edit("Gym", new_cost=10)

    @pytest.mark.parametrize("day", [0, 32])
    def test_edit_invalid_due_date(self, store, day):
        """Edits validate due dates exactly like adds."""
        store.add("Rent", due_date=1, cost=1200)
        with pytest.raises(InvalidDueDateError):
            store.edit("Rent", new_due_date=day, new_cost=1)
        assert store.get("Rent").cost == 1200

    def test_edit_february_thirtieth(self, validator_for):
        store = LedgerStore(validator=validator_for(2023, 2))
        store.add("Rent", due_date=1)
        with pytest.raises(InvalidDueDateError):
            store.edit("Rent", new_due_date=30)

    def test_edit_negative_cost(self, store):
        store.add("Rent", due_date=1, cost=1200)
        with pytest.raises(InvalidValueError):
            store.edit("Rent", new_cost=-1)
        assert store.get("Rent").cost == 1200


class TestPayAndReset:
    """Tests for pay toggling and reset."""

    def test_pay_toggles(self, store):
        """Two pays restore the original state."""
        store.add("Rent", due_date=1)
        assert store.pay("Rent") is True
        assert store.get("Rent").paid is True
        assert store.pay("Rent") is False
        assert store.get("Rent").paid is False

    def test_pay_missing(self, store):
        with pytest.raises(NotFoundError):
            store.pay("Gym")

    def test_reset_paid(self, store):
        """reset_paid clears every flag."""
        for name, day in (("Rent", 1), ("Internet", 15), ("Water", 20)):
            store.add(name, due_date=day)
        store.pay("Rent")
        store.pay("Water")
        store.reset_paid()
        assert all(not expense.paid for expense in store.snapshot().expenses)

    def test_reset_paid_noop(self, store):
        """Resetting an all-unpaid ledger changes nothing."""
        store.add("Rent", due_date=1)
        before = store.snapshot()
        store.reset_paid()
        assert store.snapshot() == before

    def test_reset_paid_empty(self, store):
        assert store.reset_paid() == 0


class TestIncomeAndNetWorth:
    """Tests for income and the derived net worth."""

    def test_recompute(self, store):
        """income 1000 with costs totalling 300 gives 700."""
        store.set_income(1000)
        store.add("Rent", due_date=1, cost=200)
        store.add("Water", due_date=2, cost=100)
        assert store.recompute_net_worth() == 700
        assert store.snapshot().net_worth == 700

    def test_recompute_empty(self, store):
        """An empty ledger sums to zero."""
        assert store.recompute_net_worth() == 0

    def test_set_income_does_not_recompute(self, store):
        store.set_income(500)
        snapshot = store.snapshot()
        assert snapshot.income == 500
        assert snapshot.net_worth == 0

    @pytest.mark.parametrize("value", [-1, float("nan"), float("inf"), "100", None])
    def test_set_income_invalid(self, store, value):
        with pytest.raises(InvalidValueError):
            store.set_income(value)
        assert store.snapshot().income == 0

    def test_add_rejects_overflowing_cost(self, store):
        """A cost that would push the total past the float range is refused."""
        store.add("Savings", due_date=1, cost=1e308)
        with pytest.raises(InvalidValueError, match="too large"):
            store.add("Vacation", due_date=2, cost=1e308)
        assert [e.name for e in store.snapshot().expenses] == ["Savings"]
        assert store.recompute_net_worth() == -1e308

    def test_edit_rejects_overflowing_cost(self, store):
        store.add("Savings", due_date=1, cost=1e308)
        store.add("Vacation", due_date=2, cost=1)
        with pytest.raises(InvalidValueError, match="too large"):
            store.edit("Vacation", new_cost=1e308)
        assert store.get("Vacation").cost == 1

    def test_edit_large_cost_replacing_itself(self, store):
        """Only the edited total counts, not the old cost plus the new one."""
        store.add("Savings", due_date=1, cost=1e308)
        assert store.edit("Savings", new_cost=1.5e308).cost == 1.5e308


class TestSnapshotAndRestore:
    """Tests for snapshots."""

    def test_snapshot_is_immutable_copy(self, store):
        """Later mutations do not show up in an earlier snapshot."""
        store.add("Rent", due_date=1)
        snapshot = store.snapshot()
        store.pay("Rent")
        store.add("Internet", due_date=15)
        assert len(snapshot.expenses) == 1
        assert snapshot.expenses[0].paid is False

    def test_initial_snapshot(self, march_validator):
        initial = LedgerSnapshot(
            income=3000,
            net_worth=1740,
            expenses=(Expense(name="Rent", cost=1260, due_date=1),),
        )
        store = LedgerStore(initial=initial, validator=march_validator)
        assert store.snapshot() == initial

    def test_restore(self, store):
        store.add("Rent", due_date=1)
        store.restore(LedgerSnapshot.empty())
        assert len(store) == 0


class TestScenario:
    """The end-to-end walk through the store operations."""

    def test_rent_and_internet(self, store):
        store.add("Rent", cost=1200, due_date=1)
        store.add("Internet", cost=60, due_date=15)
        store.set_income(3000)
        store.recompute_net_worth()
        assert store.snapshot().net_worth == 1740

        store.pay("Rent")
        assert store.get("Rent").paid is True

        store.reset_paid()
        assert store.get("Rent").paid is False

        store.remove("Internet")
        assert [expense.name for expense in store.snapshot().expenses] == ["Rent"]


class TestConcurrency:
    """Many callers mutating one store at once."""

    def test_concurrent_adds(self, store):
        """No add is lost when threads race."""
        threads_count, per_thread = 8, 25

        def worker(thread_id: int) -> None:
            for i in range(per_thread):
                store.add(f"expense-{thread_id}-{i}", due_date=1 + i % 28, cost=1)

        threads = [threading.Thread(target=worker, args=(t,)) for t in range(threads_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = store.snapshot()
        assert len(snapshot.expenses) == threads_count * per_thread
        assert len({expense.name for expense in snapshot.expenses}) == threads_count * per_thread
        assert store.recompute_net_worth() == -threads_count * per_thread

    def test_concurrent_duplicate_adds(self, store):
        """Exactly one of many racing adds of the same name wins."""
        failures = []
        lock = threading.Lock()

        def worker() -> None:
            try:
                store.add("Rent", due_date=1)
            except DuplicateNameError:
                with lock:
                    failures.append(1)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store) == 1
        assert len(failures) == 15

    def test_concurrent_toggles(self, store):
        """An even number of pays always ends unpaid."""
        store.add("Rent", due_date=1)

        def worker() -> None:
            for _ in range(50):
                store.pay("Rent")

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.get("Rent").paid is False
