"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for ledger persistence.
This allows us to:
1. Keep the ledger store free of any file handling
2. Use in-memory storage for testing
3. Swap the flat file for something else later

Storage only ever sees immutable snapshots - it never holds a reference
to live ledger state beyond a single call.
"""

from abc import ABC, abstractmethod

from expense_ledger.models.expense import LedgerSnapshot


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation must implement these methods.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the ledger lives."""
        pass

    @abstractmethod
    def load(self) -> LedgerSnapshot:
        """
        Load the persisted ledger.

        Never fails: a missing or unreadable ledger yields
        LedgerSnapshot.empty().

        Returns:
            The persisted snapshot, or the empty default
        """
        pass

    @abstractmethod
    def save(self, snapshot: LedgerSnapshot) -> None:
        """
        Persist a snapshot, replacing whatever was stored before.

        Either the old or the new content is readable afterwards.

        Args:
            snapshot: The ledger state to persist

        Raises:
            LedgerIOError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""

    error_type = "storage_error"


class LedgerIOError(StorageError):
    """Reading or writing the ledger file failed."""

    error_type = "io_failure"


class LedgerParseError(StorageError):
    """Persisted content is not a valid ledger."""

    error_type = "parse_failure"
