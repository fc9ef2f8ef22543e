"""
Tests for the Finance Ledger data models

Test strategy:
1. Unit tests for individual components (models, validators)
2. Engine tests run against in-memory stores
3. No real API calls in tests (Google Sheets is faked)
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

from src.models.ledger import (
    Aggregate,
    Budget,
    BudgetPeriod,
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    LedgerEntry,
    ReportData,
    ReportType,
    UNDEFINED,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestLedgerEntryModels:
    """Tests for income and expense entries."""

    def test_income_entry_creation(self):
        """Test IncomeEntry creation with the wire field name for the date."""
        entry = IncomeEntry(
            user_id="user-1",
            amount=Decimal("2000.00"),
            date=date(2024, 3, 1),
            source="Salary",
            category="Work",
        )
        assert entry.kind == EntryKind.INCOME
        assert entry.entry_date == date(2024, 3, 1)
        assert entry.label == "Salary"

    def test_expense_label_is_description(self):
        entry = ExpenseEntry(
            user_id="user-1",
            amount=Decimal("15"),
            entry_date=date(2024, 3, 1),
            description="Lunch",
        )
        assert entry.kind == EntryKind.EXPENSE
        assert entry.label == "Lunch"

    def test_only_concrete_entries_carry_a_label(self):
        """Shared fields alone do not say whether the label is a source or a description."""
        entry = LedgerEntry(user_id="user-1", amount=Decimal("5"), date=date(2024, 3, 1))
        assert not hasattr(entry, "label")

    def test_datetime_is_truncated_to_calendar_day(self):
        """Any time component is dropped."""
        entry = IncomeEntry(
            user_id="user-1",
            amount=Decimal("1"),
            date="2024-03-01T23:59:00Z",
            source="Gift",
        )
        assert entry.entry_date == date(2024, 3, 1)

    def test_blank_category_becomes_none(self):
        entry = ExpenseEntry(
            user_id="user-1",
            amount=Decimal("1"),
            entry_date=date(2024, 3, 1),
            description="Bus",
            category="   ",
        )
        assert entry.category is None

    def test_entry_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            ExpenseEntry(
                user_id="user-1",
                amount=Decimal("-1"),
                entry_date=date(2024, 3, 1),
                description="Refund",
            )

    def test_entry_rejects_more_than_two_decimal_places(self):
        with pytest.raises(ValueError):
            IncomeEntry(
                user_id="user-1",
                amount=Decimal("1.005"),
                entry_date=date(2024, 3, 1),
                source="Interest",
            )

    def test_entry_requires_label(self):
        with pytest.raises(ValueError):
            IncomeEntry(user_id="user-1", amount=Decimal("1"), entry_date=date(2024, 3, 1), source="")

    def test_amount_from_text_stays_decimal(self):
        """Amounts read back from storage cells are text."""
        entry = IncomeEntry.model_validate({
            "user_id": "user-1",
            "amount": "0.10",
            "date": "2024-03-01",
            "source": "Interest",
        })
        assert isinstance(entry.amount, Decimal)
        assert entry.amount == Decimal("0.10")


class TestAggregateModel:
    """Tests for the per-user aggregate."""

    def test_from_totals_computes_net_balance(self):
        aggregate = Aggregate.from_totals("user-1", Decimal("0.30"), Decimal("0.10"))
        assert aggregate.net_balance == Decimal("0.20")

    def test_zero_aggregate(self):
        aggregate = Aggregate.zero("user-1")
        assert aggregate.total_income == Decimal("0")
        assert aggregate.total_expense == Decimal("0")
        assert aggregate.net_balance == Decimal("0")


class TestBudgetModel:

    def test_budget_creation(self):
        budget = Budget(
            user_id="user-1",
            category="Food",
            planned_amount=Decimal("20"),
            period=BudgetPeriod.MONTHLY,
        )
        assert budget.period == BudgetPeriod.MONTHLY

    def test_budget_rejects_zero_planned_amount(self):
        with pytest.raises(ValueError):
            Budget(user_id="user-1", category="Food", planned_amount=Decimal("0"), period="weekly")

    def test_budget_rejects_unknown_period(self):
        with pytest.raises(ValueError):
            Budget(user_id="user-1", category="Food", planned_amount=Decimal("10"), period="daily")


class TestReportModels:

    @pytest.mark.parametrize(
        "report_type,incomes,expenses,budgets",
        [
            (ReportType.INCOME, True, False, False),
            (ReportType.EXPENSE, False, True, False),
            (ReportType.BUDGET, False, False, True),
            (ReportType.SUMMARY, True, True, True),
        ],
    )
    def test_report_type_sections(self, report_type, incomes, expenses, budgets):
        assert report_type.includes_incomes is incomes
        assert report_type.includes_expenses is expenses
        assert report_type.includes_budgets is budgets

    def test_report_data_is_empty(self):
        assert ReportData().is_empty
        assert ReportData(incomes=[], expenses=[]).is_empty

    def test_undefined_change_is_not_zero(self):
        assert UNDEFINED != Decimal("0")
        assert UNDEFINED.value == "undefined"


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.ENTRY_CREATED,
            description="Income added",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.utcoffset() == timedelta(0)

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        entry_id = uuid4()
        event = AuditEventBuilder.entry_created("user-1", "income", entry_id, "2000.00")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "entry_created"
        assert log_dict["entity_id"] == str(entry_id)
        assert log_dict["details"] == {"amount": "2000.00"}

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEventBuilder.aggregate_stale("user-1", "offline")
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "aggregate_stale"
        assert row[3] == "warning"
        assert row[9] == "offline"

    def test_budget_changed_uses_given_event_type(self):
        event = AuditEventBuilder.budget_changed(
            AuditEventType.BUDGET_DELETED, "user-1", uuid4(), "Food"
        )
        assert event.event_type == AuditEventType.BUDGET_DELETED
        assert event.entity_type == "budget"

    def test_report_generated_event(self):
        report_id = uuid4()
        event = AuditEventBuilder.report_generated(
            "user-1", report_id, "summary", "2024-03-01", "2024-03-31"
        )
        assert event.entity_id == report_id
        assert event.details["start_date"] == "2024-03-01"
        assert event.is_user_action


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
