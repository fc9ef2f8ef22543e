"""
Budget Tracker

Derives actual spend for a budget at read time. Nothing derived is stored.

The actual amount is the sum of every expense in the budget's category,
over all time. The budget's period is descriptive only, so a "weekly"
budget is compared against all-time spend. That matches the long-standing
behaviour users see; `scope_to_period=True` opts into counting only the
current period instead.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from src.ledger.aggregate import sum_amounts
from src.models.ledger import (
    Budget,
    BudgetPeriod,
    BudgetStatus,
    BudgetView,
    EntryKind,
    ExpenseEntry,
)
from src.services.storage import LedgerStorageInterface


HUNDRED = Decimal("100")


def progress_percent(actual: Decimal, planned: Decimal) -> Decimal:
    """Unclamped progress: actual / planned * 100."""
    return actual / planned * HUNDRED


def display_percent(progress: Decimal) -> Decimal:
    """Progress clamped to 100 for progress bars."""
    return min(progress, HUNDRED)


def classify_progress(progress: Decimal, warning_threshold: Decimal = Decimal("80")) -> BudgetStatus:
    if progress > HUNDRED:
        return BudgetStatus.EXCEEDED
    if progress > warning_threshold:
        return BudgetStatus.WARNING
    return BudgetStatus.ON_TRACK


def current_period_start(period: BudgetPeriod, today: date) -> date:
    """First day of the calendar period containing today. Weeks start on Monday."""
    if period == BudgetPeriod.WEEKLY:
        return today - timedelta(days=today.weekday())
    if period == BudgetPeriod.MONTHLY:
        return today.replace(day=1)
    return today.replace(month=1, day=1)


class BudgetTracker:
    """
    Attaches derived actual spend and progress to budgets.
    """

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        warning_threshold: int = 80,
        scope_to_period: bool = False,
    ):
        self._ledger = ledger_storage
        self._warning_threshold = Decimal(warning_threshold)
        self._scope_to_period = scope_to_period

    def build_view(
        self,
        budget: Budget,
        expenses: Iterable[ExpenseEntry],
        today: Optional[date] = None,
    ) -> BudgetView:
        """Pure computation over an already-fetched expense list."""
        matching = [
            e for e in expenses
            if e.user_id == budget.user_id and e.category == budget.category
        ]
        if self._scope_to_period:
            today = today or date.today()
            start = current_period_start(budget.period, today)
            matching = [e for e in matching if start <= e.entry_date <= today]

        actual = sum_amounts(matching)
        progress = progress_percent(actual, budget.planned_amount)
        return BudgetView(
            **budget.model_dump(),
            actual_amount=actual,
            progress_percent=progress,
            display_percent=display_percent(progress),
            status=classify_progress(progress, self._warning_threshold),
        )

    async def with_actual(self, budget: Budget, today: Optional[date] = None) -> BudgetView:
        expenses = await self._ledger.list_by_user(budget.user_id, EntryKind.EXPENSE)
        return self.build_view(budget, expenses, today)

    async def with_actuals(
        self,
        user_id: str,
        budgets: list[Budget],
        expenses: Optional[list[ExpenseEntry]] = None,
        today: Optional[date] = None,
    ) -> list[BudgetView]:
        """Views for many budgets of one user, reading the expense list once."""
        if not budgets:
            return []
        if expenses is None:
            expenses = await self._ledger.list_by_user(user_id, EntryKind.EXPENSE)
        return [self.build_view(budget, expenses, today) for budget in budgets]
