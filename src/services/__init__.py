"""Services package."""

from src.services.storage import (
    AggregateStorageInterface,
    AuditStorageInterface,
    BudgetStorageInterface,
    GoogleSheetsClient,
    LedgerStorageInterface,
    NotFoundError,
    ReportStorageInterface,
    StorageError,
    StoreUnavailableError,
)

__all__ = [
    "AggregateStorageInterface",
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "GoogleSheetsClient",
    "LedgerStorageInterface",
    "NotFoundError",
    "ReportStorageInterface",
    "StorageError",
    "StoreUnavailableError",
]
