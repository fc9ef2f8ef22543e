"""
Data Models Package

This package contains all Pydantic models used by the finance ledger.
All data flowing through the system must conform to these schemas.
"""

from src.models.ledger import (
    UNDEFINED,
    Aggregate,
    AnyEntry,
    Budget,
    BudgetCreate,
    BudgetPeriod,
    BudgetStatus,
    BudgetUpdate,
    BudgetView,
    CashFlow,
    CashFlowBucket,
    CategoryTotals,
    DashboardPayload,
    EntryKind,
    ExpenseCreate,
    ExpenseEntry,
    ExpenseUpdate,
    IncomeCreate,
    IncomeEntry,
    IncomeUpdate,
    LedgerEntry,
    LedgerMutation,
    PercentChange,
    PeriodComparison,
    PeriodTotals,
    ReportData,
    ReportRecord,
    ReportRequest,
    ReportResponse,
    ReportType,
    UndefinedChange,
    ValidationIssue,
    WindowKind,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "UNDEFINED",
    "Aggregate",
    "AnyEntry",
    "Budget",
    "BudgetCreate",
    "BudgetPeriod",
    "BudgetStatus",
    "BudgetUpdate",
    "BudgetView",
    "CashFlow",
    "CashFlowBucket",
    "CategoryTotals",
    "DashboardPayload",
    "EntryKind",
    "ExpenseCreate",
    "ExpenseEntry",
    "ExpenseUpdate",
    "IncomeCreate",
    "IncomeEntry",
    "IncomeUpdate",
    "LedgerEntry",
    "LedgerMutation",
    "PercentChange",
    "PeriodComparison",
    "PeriodTotals",
    "ReportData",
    "ReportRecord",
    "ReportRequest",
    "ReportResponse",
    "ReportType",
    "UndefinedChange",
    "ValidationIssue",
    "WindowKind",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
