"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Implements an in-memory backend and Google Sheets, selected at startup.
"""

from src.services.storage.interface import (
    AggregateStorageInterface,
    AuditStorageInterface,
    BudgetStorageInterface,
    LedgerStorageInterface,
    NotFoundError,
    ReportStorageInterface,
    StorageError,
    StoreUnavailableError,
)
from src.services.storage.memory import (
    InMemoryAggregateStorage,
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryLedgerStorage,
    InMemoryReportStorage,
)
from src.services.storage.google_sheets import (
    GoogleSheetsAggregateStorage,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    GoogleSheetsReportStorage,
)

__all__ = [
    # Interfaces
    "AggregateStorageInterface",
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "LedgerStorageInterface",
    "ReportStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StoreUnavailableError",
    # In-memory implementation
    "InMemoryAggregateStorage",
    "InMemoryAuditStorage",
    "InMemoryBudgetStorage",
    "InMemoryLedgerStorage",
    "InMemoryReportStorage",
    # Google Sheets implementation
    "GoogleSheetsAggregateStorage",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "GoogleSheetsReportStorage",
]
