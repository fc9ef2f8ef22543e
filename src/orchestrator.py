"""
Main Orchestrator for the Finance Ledger

Builds every component explicitly and wires them together. There is no
global store handle: stores are constructed once here and passed into
each component, and their lifetime is the lifetime of AppComponents.

DESIGN DECISION: A misconfigured Google Sheets backend fails startup.
We never fall back to the in-memory store silently, because a user would
then be writing money records that vanish on restart.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from src.audit import AuditLogger, configure_logging
from src.config import Settings, get_settings
from src.exports import ExportService, default_renderers
from src.ledger import (
    AggregateMaintainer,
    BudgetService,
    BudgetTracker,
    DashboardService,
    LedgerService,
    ReportAssembler,
)
from src.services.storage import (
    AggregateStorageInterface,
    AuditStorageInterface,
    BudgetStorageInterface,
    GoogleSheetsAggregateStorage,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    GoogleSheetsReportStorage,
    InMemoryAggregateStorage,
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryLedgerStorage,
    InMemoryReportStorage,
    LedgerStorageInterface,
    ReportStorageInterface,
)
from src.validation import LedgerValidator


logger = structlog.get_logger(__name__)


@dataclass
class Stores:
    """One instance of every store the engine needs."""

    ledger: LedgerStorageInterface
    budgets: BudgetStorageInterface
    aggregates: AggregateStorageInterface
    reports: ReportStorageInterface
    audit: AuditStorageInterface
    sheets_client: Optional[GoogleSheetsClient] = None

    @classmethod
    def in_memory(cls) -> "Stores":
        return cls(
            ledger=InMemoryLedgerStorage(),
            budgets=InMemoryBudgetStorage(),
            aggregates=InMemoryAggregateStorage(),
            reports=InMemoryReportStorage(),
            audit=InMemoryAuditStorage(),
        )

    @classmethod
    def google_sheets(cls, client: GoogleSheetsClient) -> "Stores":
        return cls(
            ledger=GoogleSheetsLedgerStorage(client),
            budgets=GoogleSheetsBudgetStorage(client),
            aggregates=GoogleSheetsAggregateStorage(client),
            reports=GoogleSheetsReportStorage(client),
            audit=GoogleSheetsAuditStorage(client),
            sheets_client=client,
        )


def create_stores(settings: Optional[Settings] = None) -> Stores:
    """
    Construct the store backend named by STORAGE_BACKEND.

    Raises:
        StoreUnavailableError: If Google Sheets is selected but unreachable
    """
    settings = settings or get_settings()
    if not settings.app.uses_google_sheets:
        return Stores.in_memory()

    client = GoogleSheetsClient(settings.google_sheets)
    client.connect()
    logger.info("google_sheets_connected", spreadsheet_id=client.settings.spreadsheet_id)
    return Stores.google_sheets(client)


@dataclass
class AppComponents:
    """Everything a front-end needs, constructed once per process."""

    ledger: LedgerService
    budgets: BudgetService
    dashboard: DashboardService
    reports: ReportAssembler
    exports: ExportService
    audit_logger: AuditLogger
    stores: Stores

    def close(self) -> None:
        if self.stores.sheets_client:
            self.stores.sheets_client.close()


def create_app_components(
    settings: Optional[Settings] = None,
    stores: Optional[Stores] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use. Defaults to get_settings().
        stores: Pre-built stores, e.g. in-memory stores in tests.
                Built from settings when omitted.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level)

    stores = stores or create_stores(settings)
    audit_logger = AuditLogger(stores.audit)
    validator = LedgerValidator()

    maintainer = AggregateMaintainer(stores.ledger, stores.aggregates, audit_logger)
    tracker = BudgetTracker(
        stores.ledger,
        warning_threshold=app_settings.budget_warning_threshold,
        scope_to_period=app_settings.scope_budget_actuals_to_period,
    )
    assembler = ReportAssembler(
        stores.ledger,
        stores.budgets,
        stores.reports,
        tracker,
        validator=validator,
        audit_logger=audit_logger,
        strict_audit=app_settings.strict_report_audit,
    )

    components = AppComponents(
        ledger=LedgerService(stores.ledger, maintainer, validator, audit_logger),
        budgets=BudgetService(stores.budgets, tracker, validator, audit_logger),
        dashboard=DashboardService(stores.ledger, stores.budgets, maintainer, tracker, app_settings),
        reports=assembler,
        exports=ExportService(
            assembler,
            renderers=default_renderers(app_settings.currency_code),
            validator=validator,
            audit_logger=audit_logger,
        ),
        audit_logger=audit_logger,
        stores=stores,
    )
    logger.info(
        "app_components_created",
        storage_backend=app_settings.storage_backend,
        environment=app_settings.app_environment,
    )
    return components
