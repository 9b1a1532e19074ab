"""
Shared fixtures.

The "current month" that due days are validated against is pinned with a
fixed clock so tests do not depend on when they run.
"""

from datetime import date
from typing import Optional

import pytest

from expense_ledger.audit import LedgerEventLogger
from expense_ledger.ledger import LedgerStore
from expense_ledger.models.expense import LedgerSnapshot
from expense_ledger.orchestrator import LedgerCommands
from expense_ledger.services.storage import InMemoryLedgerStorage, LedgerIOError
from expense_ledger.validation import DueDateValidator


def fixed_clock(year: int, month: int, day: int = 1):
    """A `today` callable that always returns the same date."""
    pinned = date(year, month, day)
    return lambda: pinned


class FlakyLedgerStorage(InMemoryLedgerStorage):
    """In-memory storage that counts saves and can fail the next few."""

    def __init__(self, initial: Optional[LedgerSnapshot] = None):
        super().__init__(initial)
        self.save_count = 0
        self.fail_next_saves = 0

    def save(self, snapshot: LedgerSnapshot) -> None:
        if self.fail_next_saves > 0:
            self.fail_next_saves -= 1
            raise LedgerIOError("Simulated write failure")
        super().save(snapshot)
        self.save_count += 1


@pytest.fixture
def validator_for():
    """Factory: DueDateValidator pinned to a given month."""
    def factory(year: int, month: int, day: int = 1, gregorian: bool = False) -> DueDateValidator:
        return DueDateValidator(today=fixed_clock(year, month, day), gregorian=gregorian)
    return factory


@pytest.fixture
def march_validator() -> DueDateValidator:
    """31-day month."""
    return DueDateValidator(today=fixed_clock(2025, 3, 5))


@pytest.fixture
def store(march_validator) -> LedgerStore:
    return LedgerStore(validator=march_validator)


@pytest.fixture
def memory_storage() -> FlakyLedgerStorage:
    return FlakyLedgerStorage()


@pytest.fixture
def commands(store, memory_storage) -> LedgerCommands:
    return LedgerCommands(
        store=store,
        storage=memory_storage,
        event_logger=LedgerEventLogger(),
    )
