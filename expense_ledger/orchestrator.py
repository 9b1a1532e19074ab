"""
Main Orchestrator for the Expense Ledger

This module ties the components together:
1. LedgerCommands - the Command Surface the presentation layer calls
2. create_app_components / LedgerSession - process wiring (load at start,
   final save at shutdown)

DESIGN DECISION: The Command Surface is total. Every operation returns a
CommandResult; ledger and storage errors are reported, never raised, so
no user input can crash the process.

Persistence is explicit. Nothing is written until the caller asks for a
save (or the session closes).
"""

import atexit
from datetime import date
from typing import Any, Callable, Optional

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from expense_ledger.audit import LedgerEventLogger, configure_logging
from expense_ledger.config import LedgerSettings, get_settings
from expense_ledger.ledger import LedgerError, LedgerStore
from expense_ledger.models.expense import CommandResult, LedgerSnapshot
from expense_ledger.queries import LedgerQueries
from expense_ledger.services.storage import (
    JsonFileLedgerStorage,
    LedgerIOError,
    LedgerStorageInterface,
    StorageError,
)
from expense_ledger.validation import DueDateValidator


logger = structlog.get_logger(__name__)


class LedgerCommands:
    """
    The fixed set of operations external callers invoke.

    Each call takes the ledger lock (inside LedgerStore), validates,
    mutates or reads, optionally recomputes net worth, and reports the
    outcome. Logging happens after the lock is released.
    """

    def __init__(
        self,
        store: LedgerStore,
        storage: LedgerStorageInterface,
        event_logger: Optional[LedgerEventLogger] = None,
        auto_recompute: bool = True,
    ):
        self._store = store
        self._storage = storage
        self._events = event_logger or LedgerEventLogger()
        self._auto_recompute = auto_recompute

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def storage(self) -> LedgerStorageInterface:
        return self._storage

    def _run(
        self,
        command: str,
        operation: Callable[[], CommandResult],
        expense_name: Optional[str] = None,
    ) -> CommandResult:
        try:
            return operation()
        except LedgerError as e:
            self._events.log_command_rejected(
                command=command,
                error_type=e.error_type,
                error_message=str(e),
                expense_name=expense_name,
            )
            return CommandResult.failed(command, e.error_type, str(e))

    def _recompute_if_enabled(self) -> None:
        if self._auto_recompute:
            self._store.recompute_net_worth()

    # -------------------------------------------------------------------
    # Expense commands
    # -------------------------------------------------------------------

    def add_expense(
        self,
        name: str,
        due_date: int,
        cost: Optional[float] = None,
    ) -> CommandResult:
        """Add an unpaid expense; cost defaults to 0."""
        def operation() -> CommandResult:
            expense = self._store.add(name, due_date=due_date, cost=cost)
            self._recompute_if_enabled()
            self._events.log_expense_added(expense.name, expense.cost, expense.due_date)
            return CommandResult.ok("add_expense")

        return self._run("add_expense", operation, expense_name=name)

    def remove_expense(self, name: str) -> CommandResult:
        """Delete an expense by name."""
        def operation() -> CommandResult:
            self._store.remove(name)
            self._recompute_if_enabled()
            self._events.log_expense_removed(name)
            return CommandResult.ok("remove_expense")

        return self._run("remove_expense", operation, expense_name=name)

    def edit_expense(
        self,
        name: str,
        new_name: Optional[str] = None,
        cost: Optional[float] = None,
        due_date: Optional[int] = None,
    ) -> CommandResult:
        """Update the supplied fields of an expense."""
        def operation() -> CommandResult:
            self._store.edit(name, new_name=new_name, new_cost=cost, new_due_date=due_date)
            if cost is not None:
                self._recompute_if_enabled()
            changes: dict[str, Any] = {
                key: value
                for key, value in (("name", new_name), ("cost", cost), ("due_date", due_date))
                if value is not None
            }
            self._events.log_expense_edited(name, changes)
            return CommandResult.ok("edit_expense")

        return self._run("edit_expense", operation, expense_name=name)

    def pay_expense(self, name: str) -> CommandResult:
        """Toggle the paid flag. details['paid'] holds the new value."""
        def operation() -> CommandResult:
            paid = self._store.pay(name)
            self._events.log_expense_pay_toggled(name, paid)
            return CommandResult.ok("pay_expense", paid=paid)

        return self._run("pay_expense", operation, expense_name=name)

    def reset_paid(self) -> CommandResult:
        """Mark every expense unpaid."""
        def operation() -> CommandResult:
            count = self._store.reset_paid()
            self._events.log_paid_reset(count)
            return CommandResult.ok("reset_paid")

        return self._run("reset_paid", operation)

    # -------------------------------------------------------------------
    # Income / net worth
    # -------------------------------------------------------------------

    def set_income(self, value: float) -> CommandResult:
        """Overwrite income (recomputing net worth when enabled)."""
        def operation() -> CommandResult:
            income = self._store.set_income(value)
            self._recompute_if_enabled()
            self._events.log_income_updated(income)
            return CommandResult.ok("set_income")

        return self._run("set_income", operation)

    # The presentation layer has always called this one edit_income
    edit_income = set_income

    def update_net_worth(self) -> CommandResult:
        """Recompute net worth. details['net_worth'] holds the result."""
        def operation() -> CommandResult:
            net_worth = self._store.recompute_net_worth()
            self._events.log_net_worth_recomputed(net_worth)
            return CommandResult.ok("update_net_worth", net_worth=net_worth)

        return self._run("update_net_worth", operation)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------

    def get_content(self) -> CommandResult:
        """Current ledger snapshot, in result.snapshot."""
        return CommandResult.ok("get_content", snapshot=self._store.snapshot())

    def snapshot(self) -> LedgerSnapshot:
        """Current ledger snapshot."""
        return self._store.snapshot()

    def queries(self) -> LedgerQueries:
        """Query helper bound to a fresh snapshot."""
        return LedgerQueries(self._store.snapshot())

    # -------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------

    def save(self) -> CommandResult:
        """
        Persist the current state.

        The snapshot is taken under the ledger lock; the write happens
        after it is released.
        """
        snapshot = self._store.snapshot()
        try:
            self._storage.save(snapshot)
        except StorageError as e:
            self._events.log_save_failed(self._storage.location, str(e))
            return CommandResult.failed("save", e.error_type, str(e))
        self._events.log_ledger_saved(self._storage.location, len(snapshot.expenses))
        return CommandResult.ok("save")

    write_file = save

    def load(self) -> CommandResult:
        """Replace the in-memory ledger with what storage holds."""
        try:
            snapshot = self._storage.load()
        except StorageError as e:
            self._events.log_command_rejected("load", e.error_type, str(e))
            return CommandResult.failed("load", e.error_type, str(e))
        self._store.restore(snapshot)
        self._events.log_ledger_loaded(self._storage.location, len(snapshot.expenses))
        return CommandResult.ok("load", snapshot=snapshot)


def create_app_components(
    settings: Optional[LedgerSettings] = None,
    storage: Optional[LedgerStorageInterface] = None,
    today: Optional[Callable[[], date]] = None,
) -> LedgerCommands:
    """
    Build the ledger for this process.

    Storage defaults to the JSON file named by the settings; the store is
    seeded from whatever it loads.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if storage is None:
        storage = JsonFileLedgerStorage(
            path=settings.ledger_path,
            indent=settings.json_indent,
            backup_corrupt=settings.backup_corrupt_file,
        )

    validator = DueDateValidator(
        today=today or date.today,
        gregorian=settings.gregorian_leap_years,
    )
    event_logger = LedgerEventLogger()

    snapshot = storage.load()
    event_logger.log_ledger_loaded(storage.location, len(snapshot.expenses))

    store = LedgerStore(initial=snapshot, validator=validator)
    return LedgerCommands(
        store=store,
        storage=storage,
        event_logger=event_logger,
        auto_recompute=settings.auto_recompute_net_worth,
    )


class LedgerSession:
    """
    Owns the ledger for the lifetime of the host process.

    Usage:
        with LedgerSession() as commands:
            commands.add_expense("Rent", due_date=1, cost=1200)

    Closing the session performs the final save, retried on I/O failure.
    """

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        commands: Optional[LedgerCommands] = None,
        wait: Optional[wait_base] = None,
    ):
        self._settings = settings or get_settings()
        self._commands = commands or create_app_components(self._settings)
        self._wait = wait or wait_exponential(multiplier=0.5, min=0.5, max=4)
        self._closed = False

    @property
    def commands(self) -> LedgerCommands:
        return self._commands

    def close(self) -> None:
        """
        Final save.

        Raises:
            LedgerIOError: if every attempt failed
        """
        if self._closed:
            return
        retrying = Retrying(
            stop=stop_after_attempt(self._settings.save_retry_attempts),
            wait=self._wait,
            retry=retry_if_exception_type(LedgerIOError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                result = self._commands.save()
                if not result.success:
                    raise LedgerIOError(result.error_message)
        self._closed = True

    def __enter__(self) -> LedgerCommands:
        return self._commands

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def register_shutdown_save(
    session: LedgerSession,
    register: Callable[[Callable[[], None]], Any] = atexit.register,
) -> Callable[[], None]:
    """
    Run the session's final save when the interpreter exits.

    For hosts that never leave a `with LedgerSession()` block, such as a
    Streamlit server. A save that still fails after every retry is logged;
    at exit there is no caller left to report it to.
    """
    def final_save() -> None:
        try:
            session.close()
        except LedgerIOError as e:
            logger.error("final_save_failed", error=str(e))

    register(final_save)
    return final_save
