"""
Report Assembler

Selects ledger and budget data for a date range. The same dataset feeds
the JSON report response and both export renderers, so section selection
and date filtering live here and nowhere else.

Report type -> sections:
    income  -> incomes
    expense -> expenses
    budget  -> budgets (never date-filtered)
    summary -> incomes + expenses (date-filtered) + budgets (unfiltered)

Date filtering is inclusive on both ends.
"""

from datetime import date
from typing import Any, Optional

import structlog

from src.audit import AuditLogger
from src.errors import StorageError
from src.ledger.budgets import BudgetTracker
from src.models.ledger import (
    EntryKind,
    LedgerEntry,
    ReportData,
    ReportRecord,
    ReportRequest,
    ReportResponse,
)
from src.services.storage import (
    BudgetStorageInterface,
    LedgerStorageInterface,
    ReportStorageInterface,
)
from src.validation import LedgerValidator


logger = structlog.get_logger(__name__)


def in_range(entry: LedgerEntry, start_date: date, end_date: date) -> bool:
    return start_date <= entry.entry_date <= end_date


class ReportAssembler:
    """
    Builds report datasets and records an audit entry per generated report.

    Audit writes are best-effort by default: a failing report store is
    logged and the data is still returned. With strict_audit=True the
    failure propagates instead.
    """

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        budget_storage: BudgetStorageInterface,
        report_storage: ReportStorageInterface,
        budget_tracker: BudgetTracker,
        validator: Optional[LedgerValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        strict_audit: bool = False,
    ):
        self._ledger = ledger_storage
        self._budgets = budget_storage
        self._reports = report_storage
        self._tracker = budget_tracker
        self._validator = validator or LedgerValidator()
        self._audit_logger = audit_logger
        self._strict_audit = strict_audit

    async def assemble(
        self,
        user_id: str,
        report_type: Any,
        start_date: Any,
        end_date: Any,
    ) -> ReportResponse:
        """
        Assemble report data and append a report record.

        Raises:
            ValidationError: Unknown report type, bad dates, or start after end
            StoreUnavailableError: If ledger or budget data cannot be read
        """
        request = self._validator.report_request(report_type, start_date, end_date)
        data = await self.collect(user_id, request)

        record = ReportRecord(
            user_id=user_id,
            report_type=request.report_type,
            start_date=request.start_date,
            end_date=request.end_date,
        )
        await self._record(record)

        return ReportResponse(
            report_id=record.id,
            generated_at=record.generated_at,
            data=data,
        )

    async def collect(self, user_id: str, request: ReportRequest) -> ReportData:
        """The dataset alone, with no audit record. Exports call this."""
        report_type = request.report_type
        data = ReportData()
        expenses = None

        if report_type.includes_incomes:
            incomes = await self._ledger.list_by_user(user_id, EntryKind.INCOME)
            data.incomes = self._filter(incomes, request)

        if report_type.includes_expenses or report_type.includes_budgets:
            expenses = await self._ledger.list_by_user(user_id, EntryKind.EXPENSE)
        if report_type.includes_expenses:
            data.expenses = self._filter(expenses, request)

        if report_type.includes_budgets:
            budgets = await self._budgets.list_by_user(user_id)
            data.budgets = await self._tracker.with_actuals(user_id, budgets, expenses=expenses)

        logger.info(
            "report_assembled",
            user_id=user_id,
            report_type=report_type.value,
            start_date=request.start_date.isoformat(),
            end_date=request.end_date.isoformat(),
        )
        return data

    async def list_reports(self, user_id: str) -> list[ReportRecord]:
        """Report records for a user, newest first."""
        return await self._reports.list_by_user(user_id)

    def _filter(self, entries: list, request: ReportRequest) -> list:
        selected = [e for e in entries if in_range(e, request.start_date, request.end_date)]
        selected.sort(key=lambda e: (e.entry_date, e.created_at))
        return selected

    async def _record(self, record: ReportRecord) -> None:
        try:
            await self._reports.append(record)
        except StorageError as e:
            if self._strict_audit:
                raise
            logger.warning(
                "report_audit_failed",
                user_id=record.user_id,
                report_id=str(record.id),
                error=str(e),
            )
            return

        if self._audit_logger:
            await self._audit_logger.log_report_generated(
                user_id=record.user_id,
                report_id=record.id,
                report_type=record.report_type.value,
                start_date=record.start_date.isoformat(),
                end_date=record.end_date.isoformat(),
            )
