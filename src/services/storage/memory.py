"""
In-Memory Storage Implementation

Used by the test-suite and for local runs without Google credentials.
Objects are copied on the way in and out so callers can never mutate
stored state by accident.

State lives on the instance, not the module: two instances never share data.
"""

from typing import Optional
from uuid import UUID

from src.errors import NotFoundError
from src.models.audit import AuditEvent
from src.models.ledger import (
    Aggregate,
    Budget,
    EntryKind,
    LedgerEntry,
    ReportRecord,
)
from src.services.storage.interface import (
    AggregateStorageInterface,
    AuditStorageInterface,
    BudgetStorageInterface,
    LedgerStorageInterface,
    ReportStorageInterface,
)


def _newest_first(entry: LedgerEntry):
    return (entry.entry_date, entry.created_at)


class InMemoryLedgerStorage(LedgerStorageInterface):

    def __init__(self):
        self._entries: dict[EntryKind, dict[UUID, LedgerEntry]] = {
            kind: {} for kind in EntryKind
        }

    async def list_by_user(self, user_id: str, kind: EntryKind) -> list[LedgerEntry]:
        entries = [
            entry.model_copy(deep=True)
            for entry in self._entries[kind].values()
            if entry.user_id == user_id
        ]
        entries.sort(key=_newest_first, reverse=True)
        return entries

    async def get_entry(self, kind: EntryKind, entry_id: UUID) -> Optional[LedgerEntry]:
        entry = self._entries[kind].get(entry_id)
        return entry.model_copy(deep=True) if entry else None

    async def create_entry(self, entry: LedgerEntry) -> LedgerEntry:
        self._entries[entry.kind][entry.id] = entry.model_copy(deep=True)
        return entry

    async def update_entry(self, entry: LedgerEntry) -> LedgerEntry:
        if entry.id not in self._entries[entry.kind]:
            raise NotFoundError(entry.kind.value, entry.id)
        self._entries[entry.kind][entry.id] = entry.model_copy(deep=True)
        return entry

    async def delete_entry(self, kind: EntryKind, entry_id: UUID) -> bool:
        return self._entries[kind].pop(entry_id, None) is not None


class InMemoryBudgetStorage(BudgetStorageInterface):

    def __init__(self):
        self._budgets: dict[UUID, Budget] = {}

    async def list_by_user(self, user_id: str) -> list[Budget]:
        budgets = [
            budget.model_copy(deep=True)
            for budget in self._budgets.values()
            if budget.user_id == user_id
        ]
        budgets.sort(key=lambda b: b.created_at, reverse=True)
        return budgets

    async def get_budget(self, budget_id: UUID) -> Optional[Budget]:
        budget = self._budgets.get(budget_id)
        return budget.model_copy(deep=True) if budget else None

    async def create_budget(self, budget: Budget) -> Budget:
        self._budgets[budget.id] = budget.model_copy(deep=True)
        return budget

    async def update_budget(self, budget: Budget) -> Budget:
        if budget.id not in self._budgets:
            raise NotFoundError("budget", budget.id)
        self._budgets[budget.id] = budget.model_copy(deep=True)
        return budget

    async def delete_budget(self, budget_id: UUID) -> bool:
        return self._budgets.pop(budget_id, None) is not None


class InMemoryAggregateStorage(AggregateStorageInterface):

    def __init__(self):
        self._aggregates: dict[str, Aggregate] = {}

    async def get(self, user_id: str) -> Optional[Aggregate]:
        aggregate = self._aggregates.get(user_id)
        return aggregate.model_copy() if aggregate else None

    async def upsert(self, aggregate: Aggregate) -> Aggregate:
        self._aggregates[aggregate.user_id] = aggregate.model_copy()
        return aggregate


class InMemoryReportStorage(ReportStorageInterface):

    def __init__(self):
        self._records: list[ReportRecord] = []

    async def append(self, record: ReportRecord) -> bool:
        self._records.append(record.model_copy())
        return True

    async def list_by_user(self, user_id: str) -> list[ReportRecord]:
        records = [r.model_copy() for r in self._records if r.user_id == user_id]
        records.sort(key=lambda r: r.generated_at, reverse=True)
        return records


class InMemoryAuditStorage(AuditStorageInterface):

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event.model_copy(deep=True))
        return True

    async def get_events_by_user(self, user_id: str) -> list[AuditEvent]:
        events = [e for e in self._events if e.user_id == user_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
