"""Shared text formatting for export renderers."""

from datetime import date
from decimal import Decimal

from src.models.ledger import ReportData


REPORT_TITLE = "Financial Report"

INCOME_SECTION = "Income Report"
EXPENSE_SECTION = "Expense Report"
BUDGET_SECTION = "Budget Report"


def format_currency(amount: Decimal, currency_code: str) -> str:
    """Currency text such as "RWF 1,234.50"."""
    return f"{currency_code} {amount:,.2f}"


def format_display_date(value: date) -> str:
    """Month/day/year without zero padding, e.g. 3/7/2024."""
    return f"{value.month}/{value.day}/{value.year}"


def populated_sections(data: ReportData) -> list[tuple[str, list]]:
    """
    (title, rows) for each section present in the report, in render order.

    Sections that are part of the report but empty are skipped.
    """
    sections = [
        (INCOME_SECTION, data.incomes),
        (EXPENSE_SECTION, data.expenses),
        (BUDGET_SECTION, data.budgets),
    ]
    return [(title, rows) for title, rows in sections if rows]
