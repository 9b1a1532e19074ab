"""
Storage Services Package

Provides the abstract persistence interface and its implementations.
The JSON file is the real backend; the in-memory one serves tests.
"""

from expense_ledger.services.storage.interface import (
    LedgerIOError,
    LedgerParseError,
    LedgerStorageInterface,
    StorageError,
)
from expense_ledger.services.storage.json_file import (
    AtomicFileWriter,
    JsonFileLedgerStorage,
    decode_ledger,
    encode_ledger,
)
from expense_ledger.services.storage.memory import InMemoryLedgerStorage

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "LedgerIOError",
    "LedgerParseError",
    "StorageError",
    # Implementations
    "AtomicFileWriter",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "decode_ledger",
    "encode_ledger",
]
