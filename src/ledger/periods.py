"""
Period Bucketizer

Groups ledger entries into calendar windows for trend charts and computes
window-over-window percentage change.

Buckets are half-open [start, end) so an entry dated exactly on a boundary
lands in exactly one bucket. Buckets come back oldest first.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Union

from src.ledger.aggregate import sum_amounts
from src.models.ledger import (
    UNDEFINED,
    CashFlowBucket,
    EntryKind,
    LedgerEntry,
    PercentChange,
    PeriodComparison,
    PeriodTotals,
    UndefinedChange,
    WindowKind,
)


BUCKET_DAYS = {
    WindowKind.DAILY: 1,
    WindowKind.WEEKLY: 7,
}

LABEL_FORMAT = "%d %b"

Number = Union[Decimal, int, str]


def bucket_bounds(
    window_kind: WindowKind,
    window_count: int,
    today: Optional[date] = None,
) -> list[tuple[date, date]]:
    """
    [start, end) pairs, oldest first.

    Daily buckets are single calendar days ending with today. Weekly
    buckets start at today minus N weeks, N = window_count - 1 .. 0.
    """
    if window_count < 1:
        raise ValueError("window_count must be at least 1")
    today = today or date.today()
    span = timedelta(days=BUCKET_DAYS[WindowKind(window_kind)])

    bounds = []
    for i in range(window_count - 1, -1, -1):
        start = today - span * i
        bounds.append((start, start + span))
    return bounds


def bucketize(
    entries: Iterable[LedgerEntry],
    window_kind: WindowKind,
    window_count: int,
    today: Optional[date] = None,
) -> list[CashFlowBucket]:
    """
    Sum income and expense per bucket.

    Entries outside every bucket are ignored.
    """
    entries = list(entries)
    buckets = []
    for start, end in bucket_bounds(window_kind, window_count, today):
        inside = [e for e in entries if start <= e.entry_date < end]
        buckets.append(CashFlowBucket(
            label=start.strftime(LABEL_FORMAT),
            start=start,
            end=end,
            income=sum_amounts(e for e in inside if e.kind == EntryKind.INCOME),
            expense=sum_amounts(e for e in inside if e.kind == EntryKind.EXPENSE),
        ))
    return buckets


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, float):
        raise TypeError("Currency values must not be floats")
    return value if isinstance(value, Decimal) else Decimal(value)


def percent_change(current: Number, previous: Number) -> PercentChange:
    """
    (current - previous) / previous * 100, or UNDEFINED when previous is 0.
    """
    current = _to_decimal(current)
    previous = _to_decimal(previous)
    if previous == 0:
        return UNDEFINED
    return (current - previous) / previous * Decimal("100")


def format_percent_change(change: PercentChange) -> str:
    """One decimal place, or "N/A" for UNDEFINED."""
    if isinstance(change, UndefinedChange):
        return "N/A"
    return f"{change:.1f}%"


def window_totals(entries: Iterable[LedgerEntry], after: date, through: date) -> PeriodTotals:
    """Totals for entries dated in (after, through]."""
    inside = [e for e in entries if after < e.entry_date <= through]
    income = sum_amounts(e for e in inside if e.kind == EntryKind.INCOME)
    expense = sum_amounts(e for e in inside if e.kind == EntryKind.EXPENSE)
    return PeriodTotals(total_income=income, total_expense=expense, net_balance=income - expense)


def compare_periods(
    entries: Iterable[LedgerEntry],
    window_days: int = 15,
    history_days: Optional[int] = None,
    today: Optional[date] = None,
) -> PeriodComparison:
    """
    Compare the last `window_days` with the `window_days` before them.

    The current window is (today - window_days, today], the previous one
    (today - 2 * window_days, today - window_days]. When history_days is
    given the previous window is clipped so it never reaches further back
    than the data the caller retrieved.
    """
    entries = list(entries)
    today = today or date.today()
    span = timedelta(days=window_days)

    current_after = today - span
    previous_after = current_after - span
    if history_days is not None:
        previous_after = max(previous_after, today - timedelta(days=history_days))

    current = window_totals(entries, current_after, today)
    previous = window_totals(entries, previous_after, current_after)

    return PeriodComparison(
        current=current,
        previous=previous,
        income_change=percent_change(current.total_income, previous.total_income),
        expense_change=percent_change(current.total_expense, previous.total_expense),
        net_balance_change=percent_change(current.net_balance, previous.net_balance),
    )
