"""Services package."""

from expense_ledger.services.storage import (
    AtomicFileWriter,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    LedgerIOError,
    LedgerParseError,
    LedgerStorageInterface,
    StorageError,
)

__all__ = [
    "AtomicFileWriter",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "LedgerIOError",
    "LedgerParseError",
    "LedgerStorageInterface",
    "StorageError",
]
