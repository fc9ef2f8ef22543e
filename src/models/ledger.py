"""
Core Data Models for the Finance Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Every monetary value is a Decimal, at rest and in flight.
Binary floats never touch currency; sums start from Decimal("0").
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


ZERO = Decimal("0")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_calendar_date(value):
    """
    Accept a date, a datetime, or an ISO string with or without a time part.

    Ledger dates are calendar days; any time component is dropped.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntryKind(str, Enum):
    """The two variants of a ledger entry."""
    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    """
    Declared budget period.

    NOTE: Descriptive only. Actual spend is summed over all time unless
    `scope_budget_actuals_to_period` is switched on.
    """
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BudgetStatus(str, Enum):
    """Budget health derived from the unclamped progress percentage."""
    ON_TRACK = "on_track"   # <= warning threshold
    WARNING = "warning"     # above threshold, up to 100%
    EXCEEDED = "exceeded"   # above 100%


class ReportType(str, Enum):
    """Which sections a report carries."""
    INCOME = "income"
    EXPENSE = "expense"
    BUDGET = "budget"
    SUMMARY = "summary"

    @property
    def includes_incomes(self) -> bool:
        return self in (ReportType.INCOME, ReportType.SUMMARY)

    @property
    def includes_expenses(self) -> bool:
        return self in (ReportType.EXPENSE, ReportType.SUMMARY)

    @property
    def includes_budgets(self) -> bool:
        return self in (ReportType.BUDGET, ReportType.SUMMARY)


class WindowKind(str, Enum):
    """Calendar bucket size for trend charts."""
    DAILY = "daily"
    WEEKLY = "weekly"


class UndefinedChange(str, Enum):
    """
    Marker for a percentage change with no baseline.

    Distinct from Decimal("0"); renders as "N/A".
    """
    UNDEFINED = "undefined"


UNDEFINED = UndefinedChange.UNDEFINED

PercentChange = Union[Decimal, UndefinedChange]


# =============================================================================
# LEDGER ENTRIES
# =============================================================================

class LedgerEntry(BaseModel):
    """
    Fields shared by income and expense entries.

    Entries are owned by exactly one user and never shared.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique entry ID"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Owner of the entry"
    )
    amount: Annotated[
        Decimal,
        Field(ge=0, decimal_places=2, description="Amount in the display currency")
    ]
    entry_date: date = Field(
        ...,
        alias="date",
        description="Calendar day of the entry"
    )
    category: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Free-form category"
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator('entry_date', mode='before')
    @classmethod
    def drop_time_component(cls, v):
        return coerce_calendar_date(v)

    @field_validator('category', mode='before')
    @classmethod
    def blank_category_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class IncomeEntry(LedgerEntry):
    """An income record. Labelled by its source."""

    kind: Literal[EntryKind.INCOME] = EntryKind.INCOME
    source: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Where the money came from"
    )

    @property
    def label(self) -> str:
        return self.source


class ExpenseEntry(LedgerEntry):
    """An expense record. Labelled by its description."""

    kind: Literal[EntryKind.EXPENSE] = EntryKind.EXPENSE
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was spent on"
    )

    @property
    def label(self) -> str:
        return self.description


AnyEntry = Union[IncomeEntry, ExpenseEntry]

ENTRY_MODELS: dict[EntryKind, type[LedgerEntry]] = {
    EntryKind.INCOME: IncomeEntry,
    EntryKind.EXPENSE: ExpenseEntry,
}


# =============================================================================
# INPUT SCHEMAS - what callers may send
# =============================================================================

class _EntryInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, extra="forbid")

    amount: Decimal = Field(..., gt=0, decimal_places=2)
    entry_date: date = Field(..., alias="date")
    category: Optional[str] = Field(default=None, max_length=100)

    @field_validator('entry_date', mode='before')
    @classmethod
    def drop_time_component(cls, v):
        return coerce_calendar_date(v)


class IncomeCreate(_EntryInput):
    source: str = Field(..., min_length=1, max_length=200)


class ExpenseCreate(_EntryInput):
    description: str = Field(..., min_length=1, max_length=200)


class _EntryPatch(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, extra="forbid")

    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    entry_date: Optional[date] = Field(default=None, alias="date")
    category: Optional[str] = Field(default=None, max_length=100)

    @field_validator('entry_date', mode='before')
    @classmethod
    def drop_time_component(cls, v):
        return coerce_calendar_date(v)


class IncomeUpdate(_EntryPatch):
    source: Optional[str] = Field(default=None, min_length=1, max_length=200)


class ExpenseUpdate(_EntryPatch):
    description: Optional[str] = Field(default=None, min_length=1, max_length=200)


CREATE_SCHEMAS: dict[EntryKind, type[BaseModel]] = {
    EntryKind.INCOME: IncomeCreate,
    EntryKind.EXPENSE: ExpenseCreate,
}

UPDATE_SCHEMAS: dict[EntryKind, type[BaseModel]] = {
    EntryKind.INCOME: IncomeUpdate,
    EntryKind.EXPENSE: ExpenseUpdate,
}


# =============================================================================
# AGGREGATE
# =============================================================================

class Aggregate(BaseModel):
    """
    Denormalized per-user totals.

    After a recompute, net_balance == total_income - total_expense exactly.
    Between a ledger mutation and the next recompute it may be stale.
    """

    user_id: str = Field(..., min_length=1)
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    net_balance: Decimal = ZERO

    @classmethod
    def from_totals(cls, user_id: str, total_income: Decimal, total_expense: Decimal) -> "Aggregate":
        return cls(
            user_id=user_id,
            total_income=total_income,
            total_expense=total_expense,
            net_balance=total_income - total_expense,
        )

    @classmethod
    def zero(cls, user_id: str) -> "Aggregate":
        return cls.from_totals(user_id, ZERO, ZERO)


# =============================================================================
# BUDGETS
# =============================================================================

class Budget(BaseModel):
    """A planned spending limit for one category. Actual spend is never stored."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    planned_amount: Decimal = Field(..., gt=0, decimal_places=2)
    period: BudgetPeriod
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class BudgetCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    category: str = Field(..., min_length=1, max_length=100)
    planned_amount: Decimal = Field(..., gt=0, decimal_places=2)
    period: BudgetPeriod


class BudgetUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    planned_amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    period: Optional[BudgetPeriod] = None


class BudgetView(Budget):
    """
    A budget with its derived actual spend.

    progress_percent is unclamped so callers can tell "exceeded" apart;
    display_percent is clamped to 100 for progress bars.
    """

    actual_amount: Decimal
    progress_percent: Decimal
    display_percent: Decimal
    status: BudgetStatus


# =============================================================================
# PERIOD BUCKETS
# =============================================================================

class CashFlowBucket(BaseModel):
    """Income and expense totals for one calendar window [start, end)."""

    label: str
    start: date
    end: date
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


class PeriodTotals(BaseModel):
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    net_balance: Decimal = ZERO


class PeriodComparison(BaseModel):
    """Window-over-window change. Each change is a Decimal or UNDEFINED."""

    current: PeriodTotals
    previous: PeriodTotals
    income_change: PercentChange
    expense_change: PercentChange
    net_balance_change: PercentChange


# =============================================================================
# REPORTS
# =============================================================================

class ReportRecord(BaseModel):
    """
    Durable audit entry for a generated report.

    The report payload itself is never stored.
    """

    id: UUID = Field(default_factory=uuid4)
    user_id: str = Field(..., min_length=1)
    report_type: ReportType
    start_date: date
    end_date: date
    generated_at: datetime = Field(default_factory=utcnow)


class ReportRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    report_type: ReportType
    start_date: date
    end_date: date

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def drop_time_component(cls, v):
        return coerce_calendar_date(v)


class ReportData(BaseModel):
    """
    Sections selected by the report type.

    None means "section not part of this report"; an empty list means
    "section requested, nothing in range".
    """

    incomes: Optional[list[IncomeEntry]] = None
    expenses: Optional[list[ExpenseEntry]] = None
    budgets: Optional[list[BudgetView]] = None

    @property
    def is_empty(self) -> bool:
        return not any([self.incomes, self.expenses, self.budgets])


class ReportResponse(BaseModel):
    report_id: UUID
    generated_at: datetime
    data: ReportData


# =============================================================================
# DASHBOARD & MUTATION RESULTS
# =============================================================================

class CategoryTotals(BaseModel):
    income: dict[str, Decimal] = Field(default_factory=dict)
    expense: dict[str, Decimal] = Field(default_factory=dict)


class CashFlow(BaseModel):
    incomes: list[IncomeEntry] = Field(default_factory=list)
    expenses: list[ExpenseEntry] = Field(default_factory=list)


class DashboardPayload(BaseModel):
    """Everything the dashboard needs in one read."""

    aggregate: Aggregate
    recent_incomes: list[IncomeEntry]
    recent_expenses: list[ExpenseEntry]
    budgets: list[BudgetView]
    category_totals: CategoryTotals
    cash_flow: CashFlow
    weekly_trend: list[CashFlowBucket]
    daily_trend: list[CashFlowBucket]
    period_change: PeriodComparison


class LedgerMutation(BaseModel):
    """
    Result of a create/update/delete.

    aggregate_stale is True when the follow-up recompute failed; the
    mutation itself still succeeded.
    """

    entry: AnyEntry
    aggregate: Optional[Aggregate] = None
    aggregate_stale: bool = False


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_field')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
