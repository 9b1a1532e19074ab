"""
Ledger Event Logger

DESIGN DECISION: Every Command Surface call is logged as one structured
event. This provides:
1. Traceability of what the user did in this session
2. Debugging capability when a command is rejected

Events are written to the local structured log only. The ledger keeps
current state, not history, so nothing here is persisted.

The logger never raises: a logging failure must not turn a successful
ledger operation into a failed one.
"""

import logging
from typing import Optional

import structlog

from expense_ledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventSeverity,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog on top of stdlib logging.

    Level filtering is done by the stdlib logger, so calling this again with
    another level takes effect immediately.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)


configure_logging()


class LedgerEventLogger:
    """Writes ledger events to the structured log."""

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._logger = logger or structlog.get_logger("expense_ledger.events")

    def log(self, event: LedgerEvent) -> bool:
        """
        Log a ledger event at the level matching its severity.

        Returns True if the event was handed to the logger.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity == LedgerEventSeverity.ERROR:
                self._logger.error("ledger_event", **log_dict)
            elif event.severity == LedgerEventSeverity.WARNING:
                self._logger.warning("ledger_event", **log_dict)
            elif event.severity == LedgerEventSeverity.DEBUG:
                self._logger.debug("ledger_event", **log_dict)
            else:
                self._logger.info("ledger_event", **log_dict)
        except Exception:
            logging.getLogger(__name__).exception("Failed to log ledger event")
            return False
        return True

    def log_expense_added(self, name: str, cost: float, due_date: int) -> None:
        self.log(LedgerEventBuilder.expense_added(name=name, cost=cost, due_date=due_date))

    def log_expense_removed(self, name: str) -> None:
        self.log(LedgerEventBuilder.expense_removed(name=name))

    def log_expense_edited(self, name: str, changes: dict) -> None:
        self.log(LedgerEventBuilder.expense_edited(name=name, changes=changes))

    def log_expense_pay_toggled(self, name: str, paid: bool) -> None:
        self.log(LedgerEventBuilder.expense_pay_toggled(name=name, paid=paid))

    def log_paid_reset(self, count: int) -> None:
        self.log(LedgerEventBuilder.paid_reset(count=count))

    def log_income_updated(self, income: float) -> None:
        self.log(LedgerEventBuilder.income_updated(income=income))

    def log_net_worth_recomputed(self, net_worth: float) -> None:
        self.log(LedgerEventBuilder.net_worth_recomputed(net_worth=net_worth))

    def log_ledger_loaded(self, location: str, expense_count: int) -> None:
        self.log(LedgerEventBuilder.ledger_loaded(path=location, expense_count=expense_count))

    def log_ledger_saved(self, location: str, expense_count: int) -> None:
        self.log(LedgerEventBuilder.ledger_saved(path=location, expense_count=expense_count))

    def log_save_failed(self, location: str, error_message: str) -> None:
        self.log(LedgerEventBuilder.save_failed(path=location, error_message=error_message))

    def log_command_rejected(
        self,
        command: str,
        error_type: str,
        error_message: str,
        expense_name: Optional[str] = None,
    ) -> None:
        """Log a command that failed validation or I/O."""
        self.log(
            LedgerEventBuilder.command_rejected(
                command=command,
                error_type=error_type,
                error_message=error_message,
                expense_name=expense_name,
            )
        )
