"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is available as a storage backend because:
1. Non-technical users can view their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions: the aggregate row is last-write-wins
- Limited query capabilities (we filter in Python)

Only the initial connection handshake is retried. Individual reads and
writes fail fast with StoreUnavailableError and the caller re-issues.
"""

import json
from typing import Optional, TypeVar
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from pydantic import BaseModel
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import GoogleSheetsSettings, get_settings
from src.errors import NotFoundError, StorageError, StoreUnavailableError
from src.models.audit import AuditEvent
from src.models.ledger import (
    Aggregate,
    Budget,
    EntryKind,
    ENTRY_MODELS,
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


# Column mappings, one list per worksheet
INCOME_COLUMNS = [
    "id",
    "user_id",
    "source",
    "amount",
    "date",
    "category",
    "created_at",
    "updated_at",
]

EXPENSE_COLUMNS = [
    "id",
    "user_id",
    "description",
    "amount",
    "date",
    "category",
    "created_at",
    "updated_at",
]

BUDGET_COLUMNS = [
    "id",
    "user_id",
    "category",
    "planned_amount",
    "period",
    "created_at",
    "updated_at",
]

AGGREGATE_COLUMNS = [
    "user_id",
    "total_income",
    "total_expense",
    "net_balance",
]

REPORT_COLUMNS = [
    "id",
    "user_id",
    "report_type",
    "start_date",
    "end_date",
    "generated_at",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "user_id",
    "entity_type",
    "entity_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

ENTRY_COLUMNS = {
    EntryKind.INCOME: INCOME_COLUMNS,
    EntryKind.EXPENSE: EXPENSE_COLUMNS,
}

ModelT = TypeVar("ModelT", bound=BaseModel)


def model_to_row(model: BaseModel, columns: list[str]) -> list[str]:
    """Serialize a model into cells, in column order. None becomes ""."""
    data = model.model_dump(mode="json", by_alias=True)
    return ["" if data.get(column) is None else str(data[column]) for column in columns]


def row_to_model(model_cls: type[ModelT], row: list, columns: list[str]) -> ModelT:
    """Parse a row back into a model. Missing trailing cells count as empty."""
    data = {}
    for index, column in enumerate(columns):
        value = row[index] if index < len(row) else ""
        if value != "":
            data[column] = value
    return model_cls.model_validate(data)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet bootstrap. Constructed once at
    process start and shared by every Google Sheets store.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[str, gspread.Worksheet] = {}
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        retry=retry_if_exception_type(StoreUnavailableError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StoreUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreUnavailableError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StoreUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get or create a worksheet with the given header row."""
        if title in self._worksheets:
            return self._worksheets[title]

        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        self._worksheets[title] = sheet
        return sheet

    def close(self) -> None:
        """Drop cached handles. The next call reconnects."""
        self._worksheets.clear()
        self._spreadsheet = None
        self._client = None


class _SheetStore:
    """Shared row plumbing for the per-entity stores below."""

    def __init__(self, client: GoogleSheetsClient):
        self._client = client

    def _sheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        return self._client.get_worksheet(title, columns)

    @staticmethod
    def _find_row_index(all_rows: list[list], key: str) -> Optional[int]:
        """1-based sheet row index for the row whose first cell is key."""
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if row and row[0] == key:
                return idx
        return None

    @staticmethod
    def _parse_rows(model_cls: type[ModelT], rows: list[list], columns: list[str]) -> list[ModelT]:
        parsed = []
        for row in rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                parsed.append(row_to_model(model_cls, row, columns))
            except ValueError:
                continue  # Skip malformed rows
        return parsed

    def _replace_row(self, sheet: gspread.Worksheet, idx: int, row: list[str]) -> None:
        sheet.update(range_name=f"A{idx}", values=[row], value_input_option="RAW")


class GoogleSheetsLedgerStorage(_SheetStore, LedgerStorageInterface):
    """
    Incomes and expenses live on separate worksheets, one entry per row.
    """

    def _entry_sheet(self, kind: EntryKind) -> gspread.Worksheet:
        title = (
            self._client.settings.incomes_sheet_name
            if kind == EntryKind.INCOME
            else self._client.settings.expenses_sheet_name
        )
        return self._sheet(title, ENTRY_COLUMNS[kind])

    async def list_by_user(self, user_id: str, kind: EntryKind) -> list[LedgerEntry]:
        try:
            rows = self._entry_sheet(kind).get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to list {kind.value} entries: {e}")

        entries = [
            entry
            for entry in self._parse_rows(ENTRY_MODELS[kind], rows, ENTRY_COLUMNS[kind])
            if entry.user_id == user_id
        ]
        entries.sort(key=lambda e: (e.entry_date, e.created_at), reverse=True)
        return entries

    async def get_entry(self, kind: EntryKind, entry_id: UUID) -> Optional[LedgerEntry]:
        try:
            all_rows = self._entry_sheet(kind).get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to get {kind.value} entry: {e}")

        idx = self._find_row_index(all_rows, str(entry_id))
        if idx is None:
            return None
        return row_to_model(ENTRY_MODELS[kind], all_rows[idx - 1], ENTRY_COLUMNS[kind])

    async def create_entry(self, entry: LedgerEntry) -> LedgerEntry:
        try:
            sheet = self._entry_sheet(entry.kind)
            sheet.append_row(model_to_row(entry, ENTRY_COLUMNS[entry.kind]), value_input_option="RAW")
            return entry
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to save {entry.kind.value} entry: {e}")

    async def update_entry(self, entry: LedgerEntry) -> LedgerEntry:
        try:
            sheet = self._entry_sheet(entry.kind)
            idx = self._find_row_index(sheet.get_all_values(), str(entry.id))
            if idx is None:
                raise NotFoundError(entry.kind.value, entry.id)
            self._replace_row(sheet, idx, model_to_row(entry, ENTRY_COLUMNS[entry.kind]))
            return entry
        except (NotFoundError, StorageError):
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to update {entry.kind.value} entry: {e}")

    async def delete_entry(self, kind: EntryKind, entry_id: UUID) -> bool:
        try:
            sheet = self._entry_sheet(kind)
            idx = self._find_row_index(sheet.get_all_values(), str(entry_id))
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to delete {kind.value} entry: {e}")


class GoogleSheetsBudgetStorage(_SheetStore, BudgetStorageInterface):

    def _budget_sheet(self) -> gspread.Worksheet:
        return self._sheet(self._client.settings.budgets_sheet_name, BUDGET_COLUMNS)

    async def list_by_user(self, user_id: str) -> list[Budget]:
        try:
            rows = self._budget_sheet().get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to list budgets: {e}")

        budgets = [b for b in self._parse_rows(Budget, rows, BUDGET_COLUMNS) if b.user_id == user_id]
        budgets.sort(key=lambda b: b.created_at, reverse=True)
        return budgets

    async def get_budget(self, budget_id: UUID) -> Optional[Budget]:
        try:
            all_rows = self._budget_sheet().get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to get budget: {e}")

        idx = self._find_row_index(all_rows, str(budget_id))
        if idx is None:
            return None
        return row_to_model(Budget, all_rows[idx - 1], BUDGET_COLUMNS)

    async def create_budget(self, budget: Budget) -> Budget:
        try:
            self._budget_sheet().append_row(model_to_row(budget, BUDGET_COLUMNS), value_input_option="RAW")
            return budget
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to save budget: {e}")

    async def update_budget(self, budget: Budget) -> Budget:
        try:
            sheet = self._budget_sheet()
            idx = self._find_row_index(sheet.get_all_values(), str(budget.id))
            if idx is None:
                raise NotFoundError("budget", budget.id)
            self._replace_row(sheet, idx, model_to_row(budget, BUDGET_COLUMNS))
            return budget
        except (NotFoundError, StorageError):
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to update budget: {e}")

    async def delete_budget(self, budget_id: UUID) -> bool:
        try:
            sheet = self._budget_sheet()
            idx = self._find_row_index(sheet.get_all_values(), str(budget_id))
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to delete budget: {e}")


class GoogleSheetsAggregateStorage(_SheetStore, AggregateStorageInterface):
    """One row per user, keyed by user_id in the first column."""

    def _aggregate_sheet(self) -> gspread.Worksheet:
        return self._sheet(self._client.settings.aggregates_sheet_name, AGGREGATE_COLUMNS)

    async def get(self, user_id: str) -> Optional[Aggregate]:
        try:
            all_rows = self._aggregate_sheet().get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to read aggregate: {e}")

        idx = self._find_row_index(all_rows, user_id)
        if idx is None:
            return None
        return row_to_model(Aggregate, all_rows[idx - 1], AGGREGATE_COLUMNS)

    async def upsert(self, aggregate: Aggregate) -> Aggregate:
        try:
            sheet = self._aggregate_sheet()
            row = model_to_row(aggregate, AGGREGATE_COLUMNS)
            idx = self._find_row_index(sheet.get_all_values(), aggregate.user_id)
            if idx is None:
                sheet.append_row(row, value_input_option="RAW")
            else:
                self._replace_row(sheet, idx, row)
            return aggregate
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to write aggregate: {e}")


class GoogleSheetsReportStorage(_SheetStore, ReportStorageInterface):
    """Report audit records are append-only."""

    def _report_sheet(self) -> gspread.Worksheet:
        return self._sheet(self._client.settings.reports_sheet_name, REPORT_COLUMNS)

    async def append(self, record: ReportRecord) -> bool:
        try:
            self._report_sheet().append_row(model_to_row(record, REPORT_COLUMNS), value_input_option="RAW")
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to append report record: {e}")

    async def list_by_user(self, user_id: str) -> list[ReportRecord]:
        try:
            rows = self._report_sheet().get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to list reports: {e}")

        records = [r for r in self._parse_rows(ReportRecord, rows, REPORT_COLUMNS) if r.user_id == user_id]
        records.sort(key=lambda r: r.generated_at, reverse=True)
        return records


class GoogleSheetsAuditStorage(_SheetStore, AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def _audit_sheet(self) -> gspread.Worksheet:
        return self._client.get_worksheet(
            self._client.settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=safe_get(1),
            event_type=safe_get(2),
            severity=safe_get(3),
            user_id=safe_get(4) or None,
            entity_type=safe_get(5) or None,
            entity_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _all_events(self) -> list[AuditEvent]:
        try:
            all_rows = self._audit_sheet().get_all_values()[1:]
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except ValueError:
                    continue
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            self._audit_sheet().append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to write audit event: {e}")

    async def get_events_by_user(self, user_id: str) -> list[AuditEvent]:
        events = [e for e in self._all_events() if e.user_id == user_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = self._all_events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
