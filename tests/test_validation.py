"""Tests for request validation and the error taxonomy."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from src.errors import NotFoundError, RenderError, StoreUnavailableError, StorageError, ValidationError
from src.models.ledger import BudgetPeriod, EntryKind, ExpenseCreate, ReportType
from src.validation import LedgerValidator, parse_payload


@pytest.fixture
def validator():
    return LedgerValidator()


class TestEntryValidation:

    def test_valid_create(self, validator):
        data = validator.entry_create(
            EntryKind.INCOME,
            {"source": " Salary ", "amount": "2000", "date": "2024-03-01T09:00:00"},
        )
        assert data.source == "Salary"
        assert data.amount == Decimal("2000")
        assert data.entry_date == date(2024, 3, 1)
        assert data.category is None

    def test_wrong_label_field_for_kind(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.entry_create(
                EntryKind.EXPENSE,
                {"source": "Salary", "amount": "10", "date": "2024-03-01"},
            )
        fields = {issue.field: issue.issue_type for issue in exc_info.value.issues}
        assert fields == {"description": "missing", "source": "unknown_field"}

    def test_bad_date(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.entry_create(
                EntryKind.EXPENSE,
                {"description": "Lunch", "amount": "10", "date": "yesterday"},
            )
        assert exc_info.value.fields == ["date"]
        assert exc_info.value.issues[0].issue_type == "invalid_value"

    def test_update_allows_any_subset(self, validator):
        data = validator.entry_update(EntryKind.EXPENSE, {"category": "Food"})
        assert data.model_fields_set == {"category"}

    def test_update_still_checks_values(self, validator):
        with pytest.raises(ValidationError):
            validator.entry_update(EntryKind.EXPENSE, {"amount": "-5"})

    def test_existing_schema_instance_passes_through(self):
        payload = ExpenseCreate(description="Lunch", amount=Decimal("10"), date=date(2024, 3, 1))
        assert parse_payload(ExpenseCreate, payload) is payload


class TestBudgetValidation:

    def test_valid_budget(self, validator):
        data = validator.budget_create({"category": "Food", "planned_amount": "20", "period": "yearly"})
        assert data.period == BudgetPeriod.YEARLY

    def test_unknown_period_is_invalid_choice(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.budget_create({"category": "Food", "planned_amount": "20", "period": "daily"})
        assert exc_info.value.issues[0].issue_type == "invalid_choice"


class TestReportValidation:

    def test_valid_request(self, validator):
        request = validator.report_request("summary", "2024-03-01", "2024-03-31")
        assert request.report_type == ReportType.SUMMARY
        assert request.end_date == date(2024, 3, 31)

    def test_same_day_range_is_allowed(self, validator):
        request = validator.report_request("income", date(2024, 3, 1), date(2024, 3, 1))
        assert request.start_date == request.end_date

    def test_reversed_range(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.report_request("income", "2024-03-31", "2024-03-01")
        assert exc_info.value.fields == ["start_date"]


class TestErrors:

    def test_not_found_payload(self):
        entry_id = uuid4()
        error = NotFoundError("expense", entry_id)
        assert error.to_dict() == {
            "error": "not_found",
            "message": "Expense not found",
            "details": {"entity": "expense", "id": str(entry_id)},
        }

    def test_store_unavailable_is_storage_error(self):
        error = StoreUnavailableError("offline")
        assert isinstance(error, StorageError)
        assert error.to_dict()["error"] == "store_unavailable"

    def test_render_error_code(self):
        assert RenderError("bad").code == "render_error"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
