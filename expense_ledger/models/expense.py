"""
Core Data Models for the Expense Ledger

These models define the strict schemas for everything the ledger holds
and everything that crosses the persistence boundary.

DESIGN DECISION: Records are frozen. The store replaces a record instead of
mutating it, so a snapshot handed to a caller can never change underneath it.
"""

import math
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# Largest day any month can have; the calendar check for the current month
# lives in the validation package.
MAX_DAY_OF_MONTH = 31


class Expense(BaseModel):
    """
    One recurring monthly obligation.

    The name is the primary key - there is no separate numeric id.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Unique expense name"
    )
    cost: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Monthly cost"
    )
    paid: bool = Field(
        default=False,
        description="Has this expense been paid this month?"
    )
    due_date: int = Field(
        ...,
        ge=1,
        le=MAX_DAY_OF_MONTH,
        description="Day of the month the expense is due"
    )

    @field_validator('name')
    @classmethod
    def reject_blank_name(cls, v: str) -> str:
        """A name made only of whitespace is not a usable key."""
        if not v.strip():
            raise ValueError("Expense name cannot be blank")
        return v


class LedgerSnapshot(BaseModel):
    """
    Immutable point-in-time copy of the whole ledger.

    Field order is the persisted key order: income, net_worth, expenses.
    """
    model_config = ConfigDict(frozen=True)

    income: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Monthly income"
    )
    net_worth: float = Field(
        default=0.0,
        allow_inf_nan=False,
        description="income minus the sum of all expense costs"
    )
    expenses: tuple[Expense, ...] = Field(
        default_factory=tuple,
        description="Expenses in insertion order"
    )

    @model_validator(mode='after')
    def validate_unique_names(self) -> 'LedgerSnapshot':
        """Expense names are unique within a ledger."""
        seen: set[str] = set()
        for expense in self.expenses:
            if expense.name in seen:
                raise ValueError(f"Duplicate expense name: {expense.name}")
            seen.add(expense.name)
        return self

    @model_validator(mode='after')
    def validate_total_cost(self) -> 'LedgerSnapshot':
        """The costs must sum to a finite number so net worth can be derived."""
        if not math.isfinite(self.total_cost):
            raise ValueError("Expense costs sum past the representable range")
        return self

    @property
    def total_cost(self) -> float:
        """Sum of every expense cost (0 for an empty ledger)."""
        return sum(expense.cost for expense in self.expenses)

    def get(self, name: str) -> Optional[Expense]:
        """Look up an expense by name."""
        for expense in self.expenses:
            if expense.name == name:
                return expense
        return None

    @classmethod
    def empty(cls) -> 'LedgerSnapshot':
        """The default ledger used when nothing usable is on disk."""
        return cls(income=0.0, net_worth=0.0, expenses=())


# =============================================================================
# QUERY MODELS
# =============================================================================

class LedgerSummary(BaseModel):
    """
    Aggregate view of a snapshot, for display.

    Computed from a snapshot, never stored.
    """
    model_config = ConfigDict(frozen=True)

    income: float
    net_worth: float
    total_cost: float = Field(..., ge=0)
    paid_total: float = Field(..., ge=0)
    unpaid_total: float = Field(..., ge=0)
    expense_count: int = Field(..., ge=0)
    paid_count: int = Field(..., ge=0)
    unpaid_names: tuple[str, ...] = Field(default_factory=tuple)
    net_worth_stale: bool = Field(
        ...,
        description="net_worth no longer equals income minus total cost"
    )

    @property
    def all_paid(self) -> bool:
        return self.paid_count == self.expense_count


# =============================================================================
# COMMAND MODELS
# =============================================================================

class CommandResult(BaseModel):
    """
    Outcome of one Command Surface call.

    Every call returns one of these - commands never raise to the caller.
    """
    model_config = ConfigDict(frozen=True)

    command: str = Field(
        ...,
        description="Name of the operation that was invoked"
    )
    success: bool
    error_type: Optional[str] = Field(
        default=None,
        description="Machine-readable error tag (e.g. 'not_found')"
    )
    error_message: Optional[str] = Field(
        default=None,
        description="Human-readable error text"
    )
    snapshot: Optional[LedgerSnapshot] = Field(
        default=None,
        description="Ledger state, for commands that return it"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Command-specific return values"
    )

    @classmethod
    def ok(
        cls,
        command: str,
        snapshot: Optional[LedgerSnapshot] = None,
        **details: Any,
    ) -> 'CommandResult':
        return cls(command=command, success=True, snapshot=snapshot, details=details)

    @classmethod
    def failed(cls, command: str, error_type: str, error_message: str) -> 'CommandResult':
        return cls(
            command=command,
            success=False,
            error_type=error_type,
            error_message=error_message,
        )
