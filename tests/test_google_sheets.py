"""
Tests for the Google Sheets stores.

No network: stores run against an in-process fake worksheet that mimics
the handful of gspread calls they make.
"""

import asyncio
from datetime import date
from decimal import Decimal
from uuid import uuid4

import gspread
import pytest

from conftest import TODAY, USER, make_expense, make_income
from src.config import GoogleSheetsSettings
from src.errors import NotFoundError, StoreUnavailableError
from src.models.audit import AuditEventBuilder
from src.models.ledger import (
    Aggregate,
    Budget,
    BudgetPeriod,
    EntryKind,
    IncomeEntry,
    ReportRecord,
    ReportType,
)
from src.services.storage import (
    GoogleSheetsAggregateStorage,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    GoogleSheetsReportStorage,
)
from src.services.storage.google_sheets import INCOME_COLUMNS, model_to_row, row_to_model


class FakeWorksheet:
    def __init__(self, title, columns):
        self.title = title
        self.rows = [list(columns)]

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(cell) for cell in row])

    def update(self, range_name, values, value_input_option=None):
        idx = int(range_name[1:])
        self.rows[idx - 1] = list(values[0])

    def delete_rows(self, idx):
        del self.rows[idx - 1]


class OfflineWorksheet(FakeWorksheet):
    def get_all_values(self):
        raise gspread.exceptions.GSpreadException("quota exceeded")

    def append_row(self, row, value_input_option=None):
        raise ConnectionError("network down")


class FakeClient:
    """Stands in for GoogleSheetsClient: settings plus get_worksheet."""

    def __init__(self, worksheet_cls=FakeWorksheet):
        self.settings = GoogleSheetsSettings.model_construct(
            credentials_path="unused.json",
            spreadsheet_id="sheet-id",
        )
        self.sheets = {}
        self._worksheet_cls = worksheet_cls

    def get_worksheet(self, title, columns, rows=1000):
        if title not in self.sheets:
            self.sheets[title] = self._worksheet_cls(title, columns)
        return self.sheets[title]


class FakeSpreadsheet:
    def __init__(self):
        self.added = []

    def worksheet(self, title):
        raise gspread.WorksheetNotFound(title)

    def add_worksheet(self, title, rows, cols):
        sheet = FakeWorksheet(title, [])
        sheet.rows = []
        self.added.append((title, rows, cols))
        return sheet


@pytest.fixture
def client():
    return FakeClient()


class TestRowMapping:

    def test_row_uses_column_order_and_wire_names(self):
        entry = make_income("2000.50", date(2024, 3, 1), source="Salary")
        row = model_to_row(entry, INCOME_COLUMNS)

        assert row[INCOME_COLUMNS.index("date")] == "2024-03-01"
        assert row[INCOME_COLUMNS.index("amount")] == "2000.50"
        assert row[INCOME_COLUMNS.index("category")] == ""

    def test_row_round_trips_exact_decimal(self):
        entry = make_income("0.10", date(2024, 3, 1))
        restored = row_to_model(IncomeEntry, model_to_row(entry, INCOME_COLUMNS), INCOME_COLUMNS)

        assert restored.amount == Decimal("0.10")
        assert restored.id == entry.id
        assert restored.category is None


class TestLedgerStorage:

    def test_create_and_list(self, client):
        storage = GoogleSheetsLedgerStorage(client)
        older = make_income("10", TODAY.replace(day=1))
        newer = make_income("20", TODAY)
        asyncio.run(storage.create_entry(older))
        asyncio.run(storage.create_entry(newer))
        asyncio.run(storage.create_entry(make_income("5", TODAY, user_id="someone-else")))

        entries = asyncio.run(storage.list_by_user(USER, EntryKind.INCOME))
        assert [e.id for e in entries] == [newer.id, older.id]
        assert "Incomes" in client.sheets

    def test_kinds_use_separate_sheets(self, client):
        storage = GoogleSheetsLedgerStorage(client)
        asyncio.run(storage.create_entry(make_expense("10", TODAY)))

        assert asyncio.run(storage.list_by_user(USER, EntryKind.INCOME)) == []
        assert len(asyncio.run(storage.list_by_user(USER, EntryKind.EXPENSE))) == 1

    def test_update_and_delete(self, client):
        storage = GoogleSheetsLedgerStorage(client)
        entry = make_expense("10", TODAY, category="Food")
        asyncio.run(storage.create_entry(entry))

        asyncio.run(storage.update_entry(entry.model_copy(update={"amount": Decimal("12.25")})))
        fetched = asyncio.run(storage.get_entry(EntryKind.EXPENSE, entry.id))
        assert fetched.amount == Decimal("12.25")

        assert asyncio.run(storage.delete_entry(EntryKind.EXPENSE, entry.id)) is True
        assert asyncio.run(storage.get_entry(EntryKind.EXPENSE, entry.id)) is None
        assert asyncio.run(storage.delete_entry(EntryKind.EXPENSE, entry.id)) is False

    def test_update_missing_entry(self, client):
        storage = GoogleSheetsLedgerStorage(client)
        with pytest.raises(NotFoundError):
            asyncio.run(storage.update_entry(make_expense("10", TODAY)))

    def test_malformed_rows_are_skipped(self, client):
        storage = GoogleSheetsLedgerStorage(client)
        asyncio.run(storage.create_entry(make_income("10", TODAY)))
        client.sheets["Incomes"].rows.append([str(uuid4()), USER, "Broken", "not-a-number", "", "", "", ""])

        entries = asyncio.run(storage.list_by_user(USER, EntryKind.INCOME))
        assert len(entries) == 1

    def test_backend_errors_become_store_unavailable(self):
        storage = GoogleSheetsLedgerStorage(FakeClient(OfflineWorksheet))

        with pytest.raises(StoreUnavailableError):
            asyncio.run(storage.list_by_user(USER, EntryKind.INCOME))
        with pytest.raises(StoreUnavailableError):
            asyncio.run(storage.create_entry(make_income("10", TODAY)))


class TestBudgetStorage:

    def test_crud(self, client):
        storage = GoogleSheetsBudgetStorage(client)
        budget = Budget(user_id=USER, category="Food", planned_amount=Decimal("20"), period=BudgetPeriod.WEEKLY)
        asyncio.run(storage.create_budget(budget))

        listed = asyncio.run(storage.list_by_user(USER))
        assert listed[0].period == BudgetPeriod.WEEKLY

        asyncio.run(storage.update_budget(budget.model_copy(update={"category": "Groceries"})))
        assert asyncio.run(storage.get_budget(budget.id)).category == "Groceries"

        assert asyncio.run(storage.delete_budget(budget.id)) is True
        assert asyncio.run(storage.list_by_user(USER)) == []


class TestAggregateStorage:

    def test_upsert_replaces_row(self, client):
        storage = GoogleSheetsAggregateStorage(client)
        asyncio.run(storage.upsert(Aggregate.zero(USER)))
        asyncio.run(storage.upsert(Aggregate.from_totals(USER, Decimal("10.10"), Decimal("0.10"))))

        assert len(client.sheets["Aggregates"].rows) == 2  # header + one row
        stored = asyncio.run(storage.get(USER))
        assert stored.net_balance == Decimal("10.00")

    def test_missing_aggregate(self, client):
        assert asyncio.run(GoogleSheetsAggregateStorage(client).get(USER)) is None


class TestReportAndAuditStorage:

    def test_report_records(self, client):
        storage = GoogleSheetsReportStorage(client)
        record = ReportRecord(
            user_id=USER, report_type=ReportType.SUMMARY, start_date=TODAY, end_date=TODAY
        )
        assert asyncio.run(storage.append(record)) is True

        records = asyncio.run(storage.list_by_user(USER))
        assert records[0].id == record.id
        assert records[0].report_type == ReportType.SUMMARY

    def test_audit_events(self, client):
        storage = GoogleSheetsAuditStorage(client)
        event = AuditEventBuilder.entry_created(USER, "income", uuid4(), "10.00")
        asyncio.run(storage.append_event(event))

        events = asyncio.run(storage.get_events_by_user(USER))
        assert events[0].event_id == event.event_id
        assert events[0].details == {"amount": "10.00"}
        assert events[0].is_user_action is True


class TestGoogleSheetsClient:

    def settings(self):
        return GoogleSheetsSettings.model_construct(
            credentials_path="/nonexistent/credentials.json",
            spreadsheet_id="sheet-id",
        )

    def test_missing_worksheet_is_created_with_header(self):
        client = GoogleSheetsClient(self.settings())
        spreadsheet = FakeSpreadsheet()
        client._spreadsheet = spreadsheet

        sheet = client.get_worksheet("Incomes", INCOME_COLUMNS)

        assert spreadsheet.added == [("Incomes", 1000, len(INCOME_COLUMNS))]
        assert sheet.rows == [INCOME_COLUMNS]
        assert client.get_worksheet("Incomes", INCOME_COLUMNS) is sheet

    def test_connect_fails_with_store_unavailable(self, monkeypatch):
        monkeypatch.setattr("time.sleep", lambda seconds: None)
        client = GoogleSheetsClient(self.settings())

        with pytest.raises(StoreUnavailableError):
            client.connect()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
