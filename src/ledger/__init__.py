"""Ledger engine package."""

from src.ledger.aggregate import AggregateMaintainer, sum_amounts
from src.ledger.budgets import BudgetTracker, classify_progress
from src.ledger.dashboard import DashboardService
from src.ledger.periods import bucketize, compare_periods, format_percent_change, percent_change
from src.ledger.reports import ReportAssembler
from src.ledger.service import BudgetService, LedgerService

__all__ = [
    "AggregateMaintainer",
    "BudgetService",
    "BudgetTracker",
    "DashboardService",
    "LedgerService",
    "ReportAssembler",
    "bucketize",
    "classify_progress",
    "compare_periods",
    "format_percent_change",
    "percent_change",
    "sum_amounts",
]
