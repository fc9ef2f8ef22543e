"""
Audit Logger

DESIGN DECISION: Every change to a user's money is logged.
This provides:
1. Complete traceability
2. Debugging capability (e.g. why an aggregate is stale)
3. User can see history of their ledger

The audit logger:
- Gracefully handles failures (doesn't fail the request if logging fails)
- Always writes a structured local log line, persists when a store is set
"""

import logging
from typing import Optional
from uuid import UUID

import structlog

from src.errors import StorageError
from src.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from src.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog on top of stdlib logging. Call once at startup."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit store (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_entry_created(self, user_id: str, kind: str, entry_id: UUID, amount: str) -> None:
        await self.log(AuditEventBuilder.entry_created(user_id, kind, entry_id, amount))

    async def log_entry_updated(
        self,
        user_id: str,
        kind: str,
        entry_id: UUID,
        changed_fields: list[str],
    ) -> None:
        await self.log(AuditEventBuilder.entry_updated(user_id, kind, entry_id, changed_fields))

    async def log_entry_deleted(self, user_id: str, kind: str, entry_id: UUID) -> None:
        await self.log(AuditEventBuilder.entry_deleted(user_id, kind, entry_id))

    async def log_budget_changed(
        self,
        event_type: AuditEventType,
        user_id: str,
        budget_id: UUID,
        category: str,
    ) -> None:
        await self.log(AuditEventBuilder.budget_changed(event_type, user_id, budget_id, category))

    async def log_aggregate_recomputed(
        self,
        user_id: str,
        total_income: str,
        total_expense: str,
        net_balance: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.aggregate_recomputed(user_id, total_income, total_expense, net_balance)
        )

    async def log_aggregate_stale(self, user_id: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.aggregate_stale(user_id, error_message))

    async def log_report_generated(
        self,
        user_id: str,
        report_id: UUID,
        report_type: str,
        start_date: str,
        end_date: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.report_generated(user_id, report_id, report_type, start_date, end_date)
        )

    async def log_report_exported(
        self,
        user_id: str,
        report_type: str,
        export_format: str,
        size_bytes: int,
    ) -> None:
        await self.log(
            AuditEventBuilder.report_exported(user_id, report_type, export_format, size_bytes)
        )

    async def log_export_failed(self, user_id: str, export_format: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.export_failed(user_id, export_format, error_message))
