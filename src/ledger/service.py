"""
Ledger and Budget Services

Caller-facing mutations. Every ledger mutation is followed by a synchronous
aggregate recompute.

DESIGN DECISION: The mutation is the source of truth, the aggregate is
derived. If the recompute cannot reach the store the mutation still
succeeds; the result is flagged aggregate_stale and the old aggregate stays
in place until the next successful recompute.
"""

from typing import Any, Optional
from uuid import UUID

import structlog

from src.audit import AuditLogger
from src.errors import NotFoundError, StorageError
from src.ledger.aggregate import AggregateMaintainer
from src.ledger.budgets import BudgetTracker
from src.models.audit import AuditEventType
from src.models.ledger import (
    ENTRY_MODELS,
    Budget,
    BudgetView,
    EntryKind,
    LedgerEntry,
    LedgerMutation,
    utcnow,
)
from src.services.storage import BudgetStorageInterface, LedgerStorageInterface
from src.validation import LedgerValidator


logger = structlog.get_logger(__name__)


class LedgerService:
    """
    Create, update, delete and read income and expense entries.
    """

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        maintainer: AggregateMaintainer,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger_storage
        self._maintainer = maintainer
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create_income(self, user_id: str, payload: Any) -> LedgerMutation:
        return await self.create_entry(user_id, EntryKind.INCOME, payload)

    async def create_expense(self, user_id: str, payload: Any) -> LedgerMutation:
        return await self.create_entry(user_id, EntryKind.EXPENSE, payload)

    async def create_entry(self, user_id: str, kind: EntryKind, payload: Any) -> LedgerMutation:
        """
        Validate and store a new entry, then recompute the aggregate.

        Raises:
            ValidationError: If the payload is malformed
            StoreUnavailableError: If the entry itself could not be written
        """
        kind = EntryKind(kind)
        data = self._validator.entry_create(kind, payload)
        entry = ENTRY_MODELS[kind](user_id=user_id, **data.model_dump())
        entry = await self._ledger.create_entry(entry)

        logger.info("entry_created", user_id=user_id, kind=kind.value, entry_id=str(entry.id))
        if self._audit_logger:
            await self._audit_logger.log_entry_created(
                user_id, kind.value, entry.id, str(entry.amount)
            )
        return await self._with_recompute(user_id, entry)

    async def update_entry(
        self,
        user_id: str,
        kind: EntryKind,
        entry_id: UUID,
        payload: Any,
    ) -> LedgerMutation:
        """
        Partial update. Only fields present in the payload change.

        An explicitly provided empty category clears it.
        """
        kind = EntryKind(kind)
        changes = self._validator.entry_update(kind, payload)
        entry = await self.get_entry(user_id, kind, entry_id)

        # Only category may be cleared; None elsewhere means "unchanged".
        updates = {
            name: value
            for name, value in changes.model_dump(include=changes.model_fields_set).items()
            if value is not None or name == "category"
        }
        changed_fields = sorted(updates)
        updated = ENTRY_MODELS[kind].model_validate({
            **entry.model_dump(),
            **updates,
            "updated_at": utcnow(),
        })
        updated = await self._ledger.update_entry(updated)

        logger.info(
            "entry_updated",
            user_id=user_id,
            kind=kind.value,
            entry_id=str(entry_id),
            fields=changed_fields,
        )
        if self._audit_logger:
            await self._audit_logger.log_entry_updated(user_id, kind.value, updated.id, changed_fields)
        return await self._with_recompute(user_id, updated)

    async def delete_entry(self, user_id: str, kind: EntryKind, entry_id: UUID) -> LedgerMutation:
        kind = EntryKind(kind)
        entry = await self.get_entry(user_id, kind, entry_id)
        if not await self._ledger.delete_entry(kind, entry.id):
            raise NotFoundError(kind.value, entry_id)

        logger.info("entry_deleted", user_id=user_id, kind=kind.value, entry_id=str(entry_id))
        if self._audit_logger:
            await self._audit_logger.log_entry_deleted(user_id, kind.value, entry.id)
        return await self._with_recompute(user_id, entry)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_entry(self, user_id: str, kind: EntryKind, entry_id: UUID) -> LedgerEntry:
        """
        Raises:
            NotFoundError: If the entry is absent or owned by another user
        """
        kind = EntryKind(kind)
        entry = await self._ledger.get_entry(kind, entry_id)
        if entry is None or entry.user_id != user_id:
            raise NotFoundError(kind.value, entry_id)
        return entry

    async def list_entries(self, user_id: str, kind: EntryKind) -> list[LedgerEntry]:
        """All entries of one kind, newest first."""
        return await self._ledger.list_by_user(user_id, EntryKind(kind))

    async def _with_recompute(self, user_id: str, entry: LedgerEntry) -> LedgerMutation:
        try:
            aggregate = await self._maintainer.recompute(user_id)
        except StorageError as e:
            logger.warning("aggregate_stale", user_id=user_id, error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_aggregate_stale(user_id, str(e))
            return LedgerMutation(entry=entry, aggregate=None, aggregate_stale=True)
        return LedgerMutation(entry=entry, aggregate=aggregate)


class BudgetService:
    """
    Budget CRUD. Reads return BudgetViews with derived actual spend.
    """

    def __init__(
        self,
        budget_storage: BudgetStorageInterface,
        tracker: BudgetTracker,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._budgets = budget_storage
        self._tracker = tracker
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger

    async def create_budget(self, user_id: str, payload: Any) -> BudgetView:
        data = self._validator.budget_create(payload)
        budget = await self._budgets.create_budget(Budget(user_id=user_id, **data.model_dump()))
        await self._audit(AuditEventType.BUDGET_CREATED, budget)
        return await self._tracker.with_actual(budget)

    async def update_budget(self, user_id: str, budget_id: UUID, payload: Any) -> BudgetView:
        changes = self._validator.budget_update(payload)
        budget = await self._owned(user_id, budget_id)

        # Budget fields are all required, so an explicit None means "unchanged".
        updates = changes.model_dump(include=changes.model_fields_set, exclude_none=True)
        budget = budget.model_copy(update={**updates, "updated_at": utcnow()})
        budget = await self._budgets.update_budget(Budget.model_validate(budget.model_dump()))
        await self._audit(AuditEventType.BUDGET_UPDATED, budget)
        return await self._tracker.with_actual(budget)

    async def delete_budget(self, user_id: str, budget_id: UUID) -> Budget:
        budget = await self._owned(user_id, budget_id)
        if not await self._budgets.delete_budget(budget.id):
            raise NotFoundError("budget", budget_id)
        await self._audit(AuditEventType.BUDGET_DELETED, budget)
        return budget

    async def get_budget(self, user_id: str, budget_id: UUID) -> BudgetView:
        return await self._tracker.with_actual(await self._owned(user_id, budget_id))

    async def list_budgets(self, user_id: str) -> list[BudgetView]:
        budgets = await self._budgets.list_by_user(user_id)
        return await self._tracker.with_actuals(user_id, budgets)

    async def _owned(self, user_id: str, budget_id: UUID) -> Budget:
        budget = await self._budgets.get_budget(budget_id)
        if budget is None or budget.user_id != user_id:
            raise NotFoundError("budget", budget_id)
        return budget

    async def _audit(self, event_type: AuditEventType, budget: Budget) -> None:
        logger.info(event_type.value, user_id=budget.user_id, budget_id=str(budget.id))
        if self._audit_logger:
            await self._audit_logger.log_budget_changed(
                event_type, budget.user_id, budget.id, budget.category
            )
