"""
Ledger Event Models

Every Command Surface call produces one structured event. Events go to the
local structured log only.

DESIGN DECISION: Events are not persisted anywhere. The ledger keeps current
state, never history.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events emitted by the Command Surface."""
    # Expense mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_REMOVED = "expense_removed"
    EXPENSE_EDITED = "expense_edited"
    EXPENSE_PAY_TOGGLED = "expense_pay_toggled"
    PAID_RESET = "paid_reset"

    # Derived values
    INCOME_UPDATED = "income_updated"
    NET_WORTH_RECOMPUTED = "net_worth_recomputed"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_SAVED = "ledger_saved"
    SAVE_FAILED = "save_failed"

    # Rejections
    COMMAND_REJECTED = "command_rejected"


class LedgerEventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerEvent(BaseModel):
    """A single structured log event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: LedgerEventType = Field(
        ...,
        description="Type of event"
    )
    severity: LedgerEventSeverity = Field(
        default=LedgerEventSeverity.INFO,
        description="Event severity"
    )
    command: Optional[str] = Field(
        default=None,
        description="Command Surface operation that produced the event"
    )
    expense_name: Optional[str] = Field(
        default=None,
        description="Expense the event relates to, if any"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict[str, Any]:
        """Flatten the event for the structured logger."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "command": self.command,
            "expense_name": self.expense_name,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Convenience constructors for the events the Command Surface emits.

    Keeps event wording consistent across call sites.
    """

    @staticmethod
    def expense_added(name: str, cost: float, due_date: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_ADDED,
            command="add_expense",
            expense_name=name,
            description=f"Expense '{name}' added",
            details={"cost": cost, "due_date": due_date},
        )

    @staticmethod
    def expense_removed(name: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_REMOVED,
            command="remove_expense",
            expense_name=name,
            description=f"Expense '{name}' removed",
        )

    @staticmethod
    def expense_edited(name: str, changes: dict[str, Any]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_EDITED,
            command="edit_expense",
            expense_name=name,
            description=f"Expense '{name}' edited",
            details={"changes": changes},
        )

    @staticmethod
    def expense_pay_toggled(name: str, paid: bool) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPENSE_PAY_TOGGLED,
            command="pay_expense",
            expense_name=name,
            description=f"Expense '{name}' marked {'paid' if paid else 'unpaid'}",
            details={"paid": paid},
        )

    @staticmethod
    def paid_reset(count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PAID_RESET,
            command="reset_paid",
            description="All expenses marked unpaid",
            details={"expense_count": count},
        )

    @staticmethod
    def income_updated(income: float) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.INCOME_UPDATED,
            command="set_income",
            description="Income updated",
            details={"income": income},
        )

    @staticmethod
    def net_worth_recomputed(net_worth: float) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.NET_WORTH_RECOMPUTED,
            severity=LedgerEventSeverity.DEBUG,
            command="update_net_worth",
            description="Net worth recomputed",
            details={"net_worth": net_worth},
        )

    @staticmethod
    def ledger_loaded(path: str, expense_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_LOADED,
            command="load",
            description="Ledger loaded",
            details={"path": path, "expense_count": expense_count},
        )

    @staticmethod
    def ledger_saved(path: str, expense_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_SAVED,
            command="save",
            description="Ledger saved",
            details={"path": path, "expense_count": expense_count},
        )

    @staticmethod
    def save_failed(path: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SAVE_FAILED,
            severity=LedgerEventSeverity.ERROR,
            command="save",
            description="Ledger save failed",
            details={"path": path},
            error_message=error_message,
        )

    @staticmethod
    def command_rejected(
        command: str,
        error_type: str,
        error_message: str,
        expense_name: Optional[str] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.COMMAND_REJECTED,
            severity=LedgerEventSeverity.WARNING,
            command=command,
            expense_name=expense_name,
            description=f"{command} rejected: {error_type}",
            details={"error_type": error_type},
            error_message=error_message,
        )
