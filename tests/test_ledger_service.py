"""Tests for LedgerService mutations and the follow-up recompute."""

import asyncio
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from conftest import USER, UnavailableAggregateStorage
from src.errors import NotFoundError, ValidationError
from src.ledger import AggregateMaintainer, LedgerService
from src.models.audit import AuditEventType
from src.models.ledger import EntryKind


SALARY = {"source": "Salary", "amount": "2000", "date": "2024-03-01", "category": "Work"}
LUNCH = {"description": "Lunch", "amount": "15.50", "date": "2024-03-02", "category": "Food"}


class TestCreate:

    def test_create_income_recomputes_aggregate(self, ledger_service):
        result = asyncio.run(ledger_service.create_income(USER, SALARY))

        assert result.entry.source == "Salary"
        assert result.entry.user_id == USER
        assert result.aggregate_stale is False
        assert result.aggregate.total_income == Decimal("2000")

    def test_end_to_end_totals(self, ledger_service):
        asyncio.run(ledger_service.create_income(USER, SALARY))
        result = asyncio.run(ledger_service.create_expense(USER, LUNCH))

        assert result.aggregate.total_income == Decimal("2000")
        assert result.aggregate.total_expense == Decimal("15.50")
        assert result.aggregate.net_balance == Decimal("1984.50")

    def test_create_rejects_missing_and_unknown_fields(self, ledger_service):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(ledger_service.create_income(USER, {"amount": "10", "colour": "red"}))

        issues = {issue.field: issue.issue_type for issue in exc_info.value.issues}
        assert issues["source"] == "missing"
        assert issues["date"] == "missing"
        assert issues["colour"] == "unknown_field"

    def test_create_rejects_zero_amount(self, ledger_service):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(ledger_service.create_expense(USER, {**LUNCH, "amount": "0"}))
        assert exc_info.value.fields == ["amount"]

    def test_create_rejects_non_object_payload(self, ledger_service):
        with pytest.raises(ValidationError):
            asyncio.run(ledger_service.create_expense(USER, ["Lunch", 15]))

    def test_error_payload_is_structured(self, ledger_service):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(ledger_service.create_expense(USER, {}))
        payload = exc_info.value.to_dict()
        assert payload["error"] == "validation_error"
        assert {issue["field"] for issue in payload["details"]["issues"]} >= {"description", "amount"}


class TestUpdate:

    def test_partial_update(self, ledger_service):
        created = asyncio.run(ledger_service.create_expense(USER, LUNCH)).entry
        result = asyncio.run(ledger_service.update_entry(
            USER, EntryKind.EXPENSE, created.id, {"amount": "20"}
        ))

        assert result.entry.amount == Decimal("20")
        assert result.entry.description == "Lunch"
        assert result.entry.category == "Food"
        assert result.entry.entry_date == date(2024, 3, 2)
        assert result.aggregate.total_expense == Decimal("20")

    def test_empty_category_clears_it(self, ledger_service):
        created = asyncio.run(ledger_service.create_expense(USER, LUNCH)).entry
        result = asyncio.run(ledger_service.update_entry(
            USER, "expense", created.id, {"category": ""}
        ))
        assert result.entry.category is None

    def test_update_other_users_entry_is_not_found(self, ledger_service):
        created = asyncio.run(ledger_service.create_expense(USER, LUNCH)).entry
        with pytest.raises(NotFoundError):
            asyncio.run(ledger_service.update_entry(
                "someone-else", EntryKind.EXPENSE, created.id, {"amount": "1"}
            ))

    def test_update_wrong_kind_is_not_found(self, ledger_service):
        created = asyncio.run(ledger_service.create_expense(USER, LUNCH)).entry
        with pytest.raises(NotFoundError):
            asyncio.run(ledger_service.update_entry(USER, EntryKind.INCOME, created.id, {"amount": "1"}))


class TestDelete:

    def test_delete_recomputes(self, ledger_service):
        created = asyncio.run(ledger_service.create_income(USER, SALARY)).entry
        result = asyncio.run(ledger_service.delete_entry(USER, EntryKind.INCOME, created.id))

        assert result.aggregate.total_income == Decimal("0")
        assert asyncio.run(ledger_service.list_entries(USER, EntryKind.INCOME)) == []

    def test_add_income_add_expense_then_delete_expense(self, ledger_service):
        """Totals follow every mutation and return to the income-only state."""
        def totals(mutation):
            agg = mutation.aggregate
            return (agg.total_income, agg.total_expense, agg.net_balance)

        income = asyncio.run(ledger_service.create_income(
            USER, {"source": "Salary", "amount": "1000", "date": "2024-03-01"}
        ))
        assert totals(income) == (Decimal("1000"), Decimal("0"), Decimal("1000"))

        rent = asyncio.run(ledger_service.create_expense(
            USER, {"description": "Rent", "amount": "400", "date": "2024-03-02"}
        ))
        assert totals(rent) == (Decimal("1000"), Decimal("400"), Decimal("600"))

        deleted = asyncio.run(ledger_service.delete_entry(USER, EntryKind.EXPENSE, rent.entry.id))
        assert totals(deleted) == (Decimal("1000"), Decimal("0"), Decimal("1000"))
        assert asyncio.run(ledger_service.list_entries(USER, EntryKind.EXPENSE)) == []

    def test_delete_missing(self, ledger_service):
        with pytest.raises(NotFoundError):
            asyncio.run(ledger_service.delete_entry(USER, EntryKind.INCOME, uuid4()))


class TestStaleAggregate:

    def test_recompute_failure_does_not_fail_mutation(self, ledger_storage, audit_logger, audit_storage):
        maintainer = AggregateMaintainer(ledger_storage, UnavailableAggregateStorage())
        service = LedgerService(ledger_storage, maintainer, audit_logger=audit_logger)

        result = asyncio.run(service.create_income(USER, SALARY))

        assert result.aggregate_stale is True
        assert result.aggregate is None
        assert len(asyncio.run(ledger_storage.list_by_user(USER, EntryKind.INCOME))) == 1

        events = asyncio.run(audit_storage.get_events_by_user(USER))
        assert AuditEventType.AGGREGATE_STALE in [e.event_type for e in events]


class TestReads:

    def test_list_newest_first(self, ledger_service):
        asyncio.run(ledger_service.create_income(USER, SALARY))
        asyncio.run(ledger_service.create_income(USER, {**SALARY, "source": "Bonus", "date": "2024-03-05"}))

        entries = asyncio.run(ledger_service.list_entries(USER, EntryKind.INCOME))
        assert [e.source for e in entries] == ["Bonus", "Salary"]

    def test_get_entry(self, ledger_service):
        created = asyncio.run(ledger_service.create_income(USER, SALARY)).entry
        fetched = asyncio.run(ledger_service.get_entry(USER, EntryKind.INCOME, created.id))
        assert fetched == created


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
