"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the aggregate/budget/report engine decoupled from storage

Every store is constructed explicitly at process start and handed to the
components that need it. There is no module-level store handle.

Implementations raise StoreUnavailableError when the backend cannot be
reached. They never retry an operation themselves.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.errors import NotFoundError, StorageError, StoreUnavailableError
from src.models.audit import AuditEvent
from src.models.ledger import (
    Aggregate,
    Budget,
    EntryKind,
    LedgerEntry,
    ReportRecord,
)


class LedgerStorageInterface(ABC):
    """
    Durable record of income and expense entries keyed by user.
    """

    @abstractmethod
    async def list_by_user(self, user_id: str, kind: EntryKind) -> list[LedgerEntry]:
        """
        List every entry of one kind for a user.

        Returns:
            Entries ordered by date, newest first

        Raises:
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def get_entry(self, kind: EntryKind, entry_id: UUID) -> Optional[LedgerEntry]:
        """
        Retrieve an entry by its ID.

        Returns:
            The entry if found, None otherwise
        """
        pass

    @abstractmethod
    async def create_entry(self, entry: LedgerEntry) -> LedgerEntry:
        """Persist a new entry and return it."""
        pass

    @abstractmethod
    async def update_entry(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Replace an existing entry.

        Raises:
            NotFoundError: If the entry doesn't exist
        """
        pass

    @abstractmethod
    async def delete_entry(self, kind: EntryKind, entry_id: UUID) -> bool:
        """
        Delete an entry by ID.

        Returns:
            True if something was deleted
        """
        pass


class BudgetStorageInterface(ABC):
    """Planned budgets keyed by user."""

    @abstractmethod
    async def list_by_user(self, user_id: str) -> list[Budget]:
        """List a user's budgets, newest first."""
        pass

    @abstractmethod
    async def get_budget(self, budget_id: UUID) -> Optional[Budget]:
        pass

    @abstractmethod
    async def create_budget(self, budget: Budget) -> Budget:
        pass

    @abstractmethod
    async def update_budget(self, budget: Budget) -> Budget:
        """
        Raises:
            NotFoundError: If the budget doesn't exist
        """
        pass

    @abstractmethod
    async def delete_budget(self, budget_id: UUID) -> bool:
        pass


class AggregateStorageInterface(ABC):
    """
    One aggregate row per user.

    Last write wins: no versioning or compare-and-swap is applied.
    """

    @abstractmethod
    async def get(self, user_id: str) -> Optional[Aggregate]:
        """Return the stored aggregate, or None if the user has none yet."""
        pass

    @abstractmethod
    async def upsert(self, aggregate: Aggregate) -> Aggregate:
        """Insert or overwrite the user's aggregate."""
        pass


class ReportStorageInterface(ABC):
    """
    Append-only sink for report audit records.
    """

    @abstractmethod
    async def append(self, record: ReportRecord) -> bool:
        """
        Append a report record.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> list[ReportRecord]:
        """List a user's report records, newest first."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_user(self, user_id: str) -> list[AuditEvent]:
        """Get all events for a user in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


__all__ = [
    "AggregateStorageInterface",
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "LedgerStorageInterface",
    "NotFoundError",
    "ReportStorageInterface",
    "StorageError",
    "StoreUnavailableError",
]
