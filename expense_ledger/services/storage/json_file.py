"""
JSON File Storage Implementation

DESIGN DECISION: The ledger lives in one pretty-printed JSON file next to
the executable because:
1. Users can read (and back up) their data with any text editor
2. No database setup required
3. The data volume is tens of records

Writes go to a temporary file in the same directory which then replaces
the ledger file, so a crash mid-write leaves the previous content intact.

Loading is deliberately lenient: a missing, unreadable or malformed file
yields the empty ledger instead of an error. Corruption must never stop
the application from starting.
"""

import json
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError

from expense_ledger.models.expense import LedgerSnapshot
from expense_ledger.services.storage.interface import (
    LedgerIOError,
    LedgerParseError,
    LedgerStorageInterface,
)


logger = structlog.get_logger(__name__)

# Keys every persisted ledger and every persisted expense must carry
LEDGER_KEYS = ("income", "net_worth", "expenses")
EXPENSE_KEYS = ("name", "cost", "paid", "due_date")

CORRUPT_SUFFIX = ".corrupt"


def encode_ledger(snapshot: LedgerSnapshot, indent: int = 2) -> str:
    """Render a snapshot in the persisted file format."""
    return snapshot.model_dump_json(indent=indent)


def decode_ledger(raw: Union[str, bytes]) -> LedgerSnapshot:
    """
    Parse persisted text (or the raw file bytes) into a snapshot.

    Raises:
        LedgerParseError: bytes that are not UTF-8, invalid JSON, wrong
            shape or missing fields
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise LedgerParseError(f"Ledger file is not valid UTF-8 (byte {e.start})") from e

    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as e:
        raise LedgerParseError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e

    if not isinstance(data, dict):
        raise LedgerParseError("Ledger must be a JSON object")

    missing = [key for key in LEDGER_KEYS if key not in data]
    if missing:
        raise LedgerParseError(f"Ledger missing fields: {missing}")

    expenses = data["expenses"]
    if not isinstance(expenses, list):
        raise LedgerParseError("'expenses' must be an array")

    for idx, item in enumerate(expenses):
        if not isinstance(item, dict):
            raise LedgerParseError(f"Expense at index {idx} is not an object")
        missing = [key for key in EXPENSE_KEYS if key not in item]
        if missing:
            raise LedgerParseError(f"Expense at index {idx} missing fields: {missing}")

    try:
        return LedgerSnapshot.model_validate(data)
    except ValidationError as e:
        raise LedgerParseError(f"Invalid ledger content: {e.error_count()} error(s)") from e


class AtomicFileWriter:
    """
    Write-then-rename file replacement.

    The content is written to a uniquely named temporary file beside the
    target, flushed and fsynced, then moved over the target with
    os.replace. On failure the temporary file is removed.
    """

    def __init__(self, fsync: bool = True, temp_suffix: str = ".tmp"):
        self._fsync = fsync
        self._temp_suffix = temp_suffix

    def write(self, target: Path, content: str) -> None:
        """
        Atomically replace `target` with `content` (UTF-8).

        Raises:
            LedgerIOError: if any step fails
        """
        directory = target.parent
        temp_name: Optional[str] = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="wb",
                prefix=target.name + "-",
                suffix=self._temp_suffix,
                dir=directory,
                delete=False,
            ) as tf:
                temp_name = tf.name
                tf.write(content.encode("utf-8"))
                tf.flush()
                if self._fsync:
                    os.fsync(tf.fileno())

            os.replace(temp_name, target)
            temp_name = None
        except OSError as e:
            raise LedgerIOError(f"Failed to write {target}: {e}") from e
        finally:
            if temp_name is not None:
                self._discard(temp_name)

        if self._fsync:
            self._sync_directory(directory)

    @staticmethod
    def _discard(temp_name: str) -> None:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("temp_file_cleanup_failed", path=temp_name, error=str(e))

    @staticmethod
    def _sync_directory(directory: Path) -> None:
        # Not every platform allows opening a directory; the rename already happened
        try:
            dir_fd = os.open(directory, os.O_RDONLY)
        except OSError:
            return
        try:
            os.fsync(dir_fd)
        except OSError as e:
            logger.debug("directory_fsync_failed", path=str(directory), error=str(e))
        finally:
            os.close(dir_fd)


class JsonFileLedgerStorage(LedgerStorageInterface):
    """
    Ledger persistence against a single JSON file.

    File access is serialised by its own lock, separate from the ledger
    lock, so a slow disk never blocks in-memory mutations.
    """

    def __init__(
        self,
        path: Path,
        indent: int = 2,
        backup_corrupt: bool = True,
        writer: Optional[AtomicFileWriter] = None,
    ):
        self._path = Path(path)
        self._indent = indent
        self._backup_corrupt = backup_corrupt
        self._writer = writer or AtomicFileWriter()
        self._file_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    @property
    def backup_path(self) -> Path:
        """Where an unreadable ledger file is copied before it can be overwritten."""
        return self._path.with_name(self._path.name + CORRUPT_SUFFIX)

    def load(self) -> LedgerSnapshot:
        with self._file_lock:
            try:
                raw = self._path.read_bytes()
            except FileNotFoundError:
                return self._create_default()
            except OSError as e:
                logger.warning(
                    "ledger_read_failed",
                    path=self.location,
                    error=str(e),
                    fallback="empty_ledger",
                )
                return LedgerSnapshot.empty()

            try:
                return decode_ledger(raw)
            except LedgerParseError as e:
                logger.warning(
                    "ledger_parse_failed",
                    path=self.location,
                    error=str(e),
                    fallback="empty_ledger",
                )
                if self._backup_corrupt and raw.strip():
                    self._backup()
                return LedgerSnapshot.empty()

    def save(self, snapshot: LedgerSnapshot) -> None:
        content = encode_ledger(snapshot, self._indent)
        with self._file_lock:
            self._writer.write(self._path, content)
        logger.debug(
            "ledger_written",
            path=self.location,
            expense_count=len(snapshot.expenses),
        )

    def _create_default(self) -> LedgerSnapshot:
        empty = LedgerSnapshot.empty()
        try:
            self._writer.write(self._path, encode_ledger(empty, self._indent))
        except LedgerIOError as e:
            logger.warning("ledger_create_failed", path=self.location, error=str(e))
        else:
            logger.info("ledger_created", path=self.location)
        return empty

    def _backup(self) -> None:
        try:
            shutil.copyfile(self._path, self.backup_path)
        except OSError as e:
            logger.warning("ledger_backup_failed", path=str(self.backup_path), error=str(e))
        else:
            logger.info("ledger_backed_up", path=str(self.backup_path))
