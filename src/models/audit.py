"""
Audit Models for the Finance Ledger

Every ledger mutation, recompute and report pull is logged for audit purposes.
This provides:
1. Traceability of every change to a user's money
2. Debugging information when an aggregate goes stale
3. Ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from src.models.ledger import utcnow


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger
    ENTRY_CREATED = "entry_created"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"

    # Budgets
    BUDGET_CREATED = "budget_created"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_DELETED = "budget_deleted"

    # Aggregate
    AGGREGATE_RECOMPUTED = "aggregate_recomputed"
    AGGREGATE_STALE = "aggregate_stale"

    # Reports
    REPORT_GENERATED = "report_generated"
    REPORT_EXPORTED = "report_exported"
    EXPORT_FAILED = "export_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - who and what is this about?
    user_id: Optional[str] = Field(
        default=None,
        description="User whose data was touched"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'income', 'expense', 'budget', 'report')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, user_id, entity_type,
         entity_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.user_id or "",
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_created(user_id, "expense", entry_id, amount)
        event = AuditEventBuilder.aggregate_stale(user_id, error_message)
    """

    @staticmethod
    def entry_created(
        user_id: str,
        kind: str,
        entry_id: UUID,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_CREATED,
            user_id=user_id,
            entity_type=kind,
            entity_id=entry_id,
            description=f"{kind.capitalize()} added: {amount}",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def entry_updated(
        user_id: str,
        kind: str,
        entry_id: UUID,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_UPDATED,
            user_id=user_id,
            entity_type=kind,
            entity_id=entry_id,
            description=f"{kind.capitalize()} updated",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def entry_deleted(
        user_id: str,
        kind: str,
        entry_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_DELETED,
            user_id=user_id,
            entity_type=kind,
            entity_id=entry_id,
            description=f"{kind.capitalize()} deleted",
            is_user_action=True,
        )

    @staticmethod
    def budget_changed(
        event_type: AuditEventType,
        user_id: str,
        budget_id: UUID,
        category: str,
    ) -> AuditEvent:
        verb = event_type.value.split("_", 1)[1]
        return AuditEvent(
            event_type=event_type,
            user_id=user_id,
            entity_type="budget",
            entity_id=budget_id,
            description=f"Budget {verb}: {category}",
            details={"category": category},
            is_user_action=True,
        )

    @staticmethod
    def aggregate_recomputed(
        user_id: str,
        total_income: str,
        total_expense: str,
        net_balance: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AGGREGATE_RECOMPUTED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            entity_type="aggregate",
            description="Aggregate recomputed",
            details={
                "total_income": total_income,
                "total_expense": total_expense,
                "net_balance": net_balance,
            },
        )

    @staticmethod
    def aggregate_stale(
        user_id: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AGGREGATE_STALE,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="aggregate",
            description="Aggregate recompute failed; totals are stale until the next recompute",
            error_message=error_message,
        )

    @staticmethod
    def report_generated(
        user_id: str,
        report_id: UUID,
        report_type: str,
        start_date: str,
        end_date: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            user_id=user_id,
            entity_type="report",
            entity_id=report_id,
            description=f"{report_type.capitalize()} report generated for {start_date}..{end_date}",
            details={
                "report_type": report_type,
                "start_date": start_date,
                "end_date": end_date,
            },
            is_user_action=True,
        )

    @staticmethod
    def report_exported(
        user_id: str,
        report_type: str,
        export_format: str,
        size_bytes: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_EXPORTED,
            user_id=user_id,
            entity_type="report",
            description=f"{report_type.capitalize()} report exported as {export_format}",
            details={
                "report_type": report_type,
                "format": export_format,
                "size_bytes": size_bytes,
            },
            is_user_action=True,
        )

    @staticmethod
    def export_failed(
        user_id: str,
        export_format: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="report",
            description=f"Export to {export_format} failed",
            error_message=error_message,
        )
