"""
Dashboard

Assembles the whole dashboard payload in one read: the stored aggregate
(returned even when stale), recent entries, budgets with actual spend,
per-category totals, recent cash flow, trend buckets and the
period-over-period change.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from src.config import AppSettings
from src.ledger.aggregate import AggregateMaintainer
from src.ledger.budgets import BudgetTracker
from src.ledger.periods import bucketize, compare_periods
from src.models.ledger import (
    ZERO,
    Aggregate,
    CashFlow,
    CategoryTotals,
    DashboardPayload,
    EntryKind,
    LedgerEntry,
    WindowKind,
)
from src.services.storage import BudgetStorageInterface, LedgerStorageInterface


logger = structlog.get_logger(__name__)

UNCATEGORIZED = "Uncategorized"


def totals_by_category(entries: Iterable[LedgerEntry]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for entry in entries:
        key = entry.category or UNCATEGORIZED
        totals[key] = totals.get(key, ZERO) + entry.amount
    return totals


def oldest_first(entries: Iterable[LedgerEntry]) -> list:
    return sorted(entries, key=lambda e: (e.entry_date, e.created_at))


class DashboardService:

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        budget_storage: BudgetStorageInterface,
        maintainer: AggregateMaintainer,
        tracker: BudgetTracker,
        settings: Optional[AppSettings] = None,
    ):
        self._ledger = ledger_storage
        self._budgets = budget_storage
        self._maintainer = maintainer
        self._tracker = tracker
        self._settings = settings or AppSettings()

    async def load(self, user_id: str, today: Optional[date] = None) -> DashboardPayload:
        """
        Build the dashboard payload.

        Raises:
            StoreUnavailableError: If any store read fails. No partial payload.
        """
        today = today or date.today()
        settings = self._settings

        aggregate = await self._maintainer.fetch(user_id)
        incomes = await self._ledger.list_by_user(user_id, EntryKind.INCOME)
        expenses = await self._ledger.list_by_user(user_id, EntryKind.EXPENSE)
        budgets = await self._budgets.list_by_user(user_id)

        # Both lists come back newest first.
        limit = settings.recent_entries_limit
        cutoff = today - timedelta(days=settings.cash_flow_window_days)
        everything = incomes + expenses
        history_days = max(settings.cash_flow_window_days, settings.comparison_window_days)

        payload = DashboardPayload(
            aggregate=aggregate,
            recent_incomes=incomes[:limit],
            recent_expenses=expenses[:limit],
            budgets=await self._tracker.with_actuals(user_id, budgets, expenses=expenses, today=today),
            category_totals=CategoryTotals(
                income=totals_by_category(incomes),
                expense=totals_by_category(expenses),
            ),
            cash_flow=CashFlow(
                incomes=oldest_first(e for e in incomes if e.entry_date >= cutoff),
                expenses=oldest_first(e for e in expenses if e.entry_date >= cutoff),
            ),
            weekly_trend=bucketize(everything, WindowKind.WEEKLY, settings.weekly_bucket_count, today),
            daily_trend=bucketize(everything, WindowKind.DAILY, settings.daily_bucket_count, today),
            period_change=compare_periods(
                everything,
                window_days=settings.comparison_window_days,
                history_days=history_days,
                today=today,
            ),
        )

        logger.debug(
            "dashboard_loaded",
            user_id=user_id,
            incomes=len(incomes),
            expenses=len(expenses),
            budgets=len(budgets),
        )
        return payload

    async def refresh(self, user_id: str) -> Aggregate:
        """Force a full aggregate recompute."""
        return await self._maintainer.recompute(user_id)
