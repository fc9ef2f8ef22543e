"""
Shared fixtures.

Every engine component is built on fresh in-memory stores per test, so no
test touches the network or sees another test's data.
"""

from datetime import date
from decimal import Decimal

import pytest

from src.audit import AuditLogger
from src.errors import StoreUnavailableError
from src.exports import ExportService, default_renderers
from src.ledger import (
    AggregateMaintainer,
    BudgetService,
    BudgetTracker,
    DashboardService,
    LedgerService,
    ReportAssembler,
)
from src.models.ledger import ExpenseEntry, IncomeEntry
from src.services.storage import (
    InMemoryAggregateStorage,
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryLedgerStorage,
    InMemoryReportStorage,
)


TODAY = date(2024, 3, 20)
USER = "user-1"


class UnavailableAggregateStorage(InMemoryAggregateStorage):
    """Aggregate store whose writes always fail."""

    async def upsert(self, aggregate):
        raise StoreUnavailableError("aggregate store offline")


class UnavailableReportStorage(InMemoryReportStorage):
    """Report audit sink whose appends always fail."""

    async def append(self, record):
        raise StoreUnavailableError("report store offline")


def make_income(amount, on, category=None, source="Salary", user_id=USER):
    return IncomeEntry(
        user_id=user_id,
        amount=Decimal(str(amount)),
        entry_date=on,
        category=category,
        source=source,
    )


def make_expense(amount, on, category=None, description="Groceries", user_id=USER):
    return ExpenseEntry(
        user_id=user_id,
        amount=Decimal(str(amount)),
        entry_date=on,
        category=category,
        description=description,
    )


@pytest.fixture
def ledger_storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def budget_storage():
    return InMemoryBudgetStorage()


@pytest.fixture
def aggregate_storage():
    return InMemoryAggregateStorage()


@pytest.fixture
def report_storage():
    return InMemoryReportStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def maintainer(ledger_storage, aggregate_storage, audit_logger):
    return AggregateMaintainer(ledger_storage, aggregate_storage, audit_logger)


@pytest.fixture
def tracker(ledger_storage):
    return BudgetTracker(ledger_storage)


@pytest.fixture
def ledger_service(ledger_storage, maintainer, audit_logger):
    return LedgerService(ledger_storage, maintainer, audit_logger=audit_logger)


@pytest.fixture
def budget_service(budget_storage, tracker, audit_logger):
    return BudgetService(budget_storage, tracker, audit_logger=audit_logger)


@pytest.fixture
def assembler(ledger_storage, budget_storage, report_storage, tracker, audit_logger):
    return ReportAssembler(
        ledger_storage,
        budget_storage,
        report_storage,
        tracker,
        audit_logger=audit_logger,
    )


@pytest.fixture
def dashboard(ledger_storage, budget_storage, maintainer, tracker):
    return DashboardService(ledger_storage, budget_storage, maintainer, tracker)


@pytest.fixture
def export_service(assembler, audit_logger):
    return ExportService(assembler, default_renderers("RWF"), audit_logger=audit_logger)
