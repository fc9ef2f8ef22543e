"""
Aggregate Maintainer

Keeps the per-user summary (total income, total expense, net balance)
in line with the ledger by rescanning every entry on each recompute.

DESIGN DECISION: No incremental deltas. A full rescan is always correct,
and ledgers here are personal-scale. Concurrent recomputes for one user
race on the aggregate row; whichever upsert lands last wins.
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from src.audit import AuditLogger
from src.models.ledger import ZERO, Aggregate, EntryKind, LedgerEntry
from src.services.storage import AggregateStorageInterface, LedgerStorageInterface


logger = structlog.get_logger(__name__)


def sum_amounts(entries: Iterable[LedgerEntry]) -> Decimal:
    """Exact decimal sum of entry amounts."""
    return sum((entry.amount for entry in entries), ZERO)


class AggregateMaintainer:
    """
    Recomputes and serves the denormalized per-user aggregate.
    """

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        aggregate_storage: AggregateStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger_storage
        self._aggregates = aggregate_storage
        self._audit_logger = audit_logger

    async def recompute(self, user_id: str) -> Aggregate:
        """
        Rescan the user's ledger and overwrite their aggregate.

        Raises:
            StoreUnavailableError: If the ledger or aggregate store is unreachable.
                The previously stored aggregate is left untouched.
        """
        incomes = await self._ledger.list_by_user(user_id, EntryKind.INCOME)
        expenses = await self._ledger.list_by_user(user_id, EntryKind.EXPENSE)

        aggregate = Aggregate.from_totals(
            user_id=user_id,
            total_income=sum_amounts(incomes),
            total_expense=sum_amounts(expenses),
        )
        await self._aggregates.upsert(aggregate)

        logger.debug(
            "aggregate_recomputed",
            user_id=user_id,
            incomes=len(incomes),
            expenses=len(expenses),
        )
        if self._audit_logger:
            await self._audit_logger.log_aggregate_recomputed(
                user_id=user_id,
                total_income=str(aggregate.total_income),
                total_expense=str(aggregate.total_expense),
                net_balance=str(aggregate.net_balance),
            )
        return aggregate

    async def fetch(self, user_id: str) -> Aggregate:
        """
        Return the stored aggregate as-is, creating a zeroed one on first access.

        A stale aggregate is returned without complaint.
        """
        aggregate = await self._aggregates.get(user_id)
        if aggregate is None:
            aggregate = Aggregate.zero(user_id)
            await self._aggregates.upsert(aggregate)
        return aggregate
