"""In-memory storage, for tests and throwaway sessions."""

from typing import Optional

from expense_ledger.models.expense import LedgerSnapshot
from expense_ledger.services.storage.interface import LedgerStorageInterface


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Keeps the last saved snapshot in memory."""

    def __init__(self, initial: Optional[LedgerSnapshot] = None):
        self._snapshot = initial

    @property
    def location(self) -> str:
        return "memory"

    def load(self) -> LedgerSnapshot:
        return self._snapshot if self._snapshot is not None else LedgerSnapshot.empty()

    def save(self, snapshot: LedgerSnapshot) -> None:
        self._snapshot = snapshot
