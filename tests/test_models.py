"""
Tests for Personal Ledger

Test strategy:
1. Unit tests for individual components (models, calculations, storage)
2. Engine tests through the public API with in-memory storage
3. No real user data directory in tests (tmp_path only)
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from ledger.models.entities import (
    Account,
    AccountType,
    BudgetAllocation,
    Category,
    LedgerSnapshot,
    Transaction,
    TransactionType,
)
from ledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)
from ledger.models.validation import ValidationIssue, ValidationResult


class TestEntityModels:
    """Tests for ledger entity models."""

    def test_account_creation(self):
        """Test Account model creation."""
        account = Account(name="Checking", type=AccountType.CHECKING)
        assert account.name == "Checking"
        assert account.type == AccountType.CHECKING
        assert account.id is not None

    def test_account_strips_whitespace(self):
        """Test that whitespace is stripped from account names."""
        account = Account(name="  Visa  ", type="credit")
        assert account.name == "Visa"
        assert account.type is AccountType.CREDIT

    def test_accounts_get_unique_ids(self):
        """Test that two accounts with the same name are distinct."""
        a = Account(name="Cash", type=AccountType.CHECKING)
        b = Account(name="Cash", type=AccountType.CHECKING)
        assert a.id != b.id

    def test_entities_are_frozen(self):
        """Test that entities cannot be mutated in place."""
        category = Category(name="Groceries")
        with pytest.raises(ValidationError):
            category.name = "Food"

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(
                amount=Decimal("-1"),
                type=TransactionType.EXPENSE,
                date=datetime(2026, 1, 1),
            )

    def test_transaction_defaults(self):
        """Test optional transaction fields."""
        tx = Transaction(
            amount=Decimal("0"),
            type=TransactionType.INCOME,
            date=datetime(2026, 1, 1),
        )
        assert tx.purpose == ""
        assert tx.note == ""
        assert tx.account_id is None
        assert tx.category_id is None
        assert tx.is_payback is False

    def test_signed_amount(self):
        """Test that direction comes from the type only."""
        income = Transaction(amount=Decimal("10"), type="income", date=datetime(2026, 1, 1))
        expense = Transaction(amount=Decimal("10"), type="expense", date=datetime(2026, 1, 1))
        assert income.signed_amount == Decimal("10")
        assert expense.signed_amount == Decimal("-10")

    def test_transaction_date_stored_naive_local(self):
        """Test that aware dates are converted to naive local time."""
        moment = datetime(2026, 2, 10, 23, 30, tzinfo=timezone(timedelta(hours=9)))
        tx = Transaction(amount=Decimal("1"), type="expense", date=moment)

        assert tx.date.tzinfo is None
        assert tx.date == moment.astimezone().replace(tzinfo=None)

        naive = datetime(2026, 2, 10, 23, 30)
        assert Transaction(amount=Decimal("1"), type="expense", date=naive).date == naive

    def test_event_description_has_no_length_limit(self):
        """Test that long entity names fit into an event."""
        event = LedgerEventBuilder.account_added(uuid4(), "x" * 2000, "checking")
        assert event.description.endswith("x" * 2000)

    def test_allocation_month_key_format(self):
        """Test that month keys must look like YYYY-MM."""
        allocation = BudgetAllocation(
            category_id=uuid4(), month_key="2026-02", amount=Decimal("200")
        )
        assert allocation.month_key == "2026-02"

        for bad in ["2026-2", "2026-13", "Feb 2026", "2026-02-01", ""]:
            with pytest.raises(ValueError):
                BudgetAllocation(category_id=uuid4(), month_key=bad, amount=Decimal("1"))

    def test_allocation_allows_negative_amount(self):
        """Test that budget amounts are not sign-checked."""
        allocation = BudgetAllocation(
            category_id=uuid4(), month_key="2026-02", amount=Decimal("-5")
        )
        assert allocation.amount == Decimal("-5")

    def test_snapshot_ignores_unknown_keys(self):
        """Test that extra top-level keys do not break decoding."""
        snapshot = LedgerSnapshot.model_validate({
            "accounts": [],
            "items": [],
            "categories": [],
            "allocations": [],
            "version": 2,
        })
        assert snapshot.is_empty

    def test_type_display_names(self):
        """Test display names of enums."""
        assert AccountType.CHECKING.display_name == "Checking"
        assert AccountType.CREDIT.display_name == "Credit"
        assert TransactionType.INCOME.display_name == "Income"
        assert TransactionType.EXPENSE.display_name == "Expense"


class TestEventModels:
    """Tests for change event models."""

    def test_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = LedgerEvent(
            event_type=LedgerEventType.CATEGORY_ADDED,
            description="Category added: Rent",
            details={"name": "Rent"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "category_added"
        assert log_dict["details"]["name"] == "Rent"
        assert log_dict["entity_id"] is None

    def test_builder_payback_recorded(self):
        """Test LedgerEventBuilder.payback_recorded."""
        group_id, from_id, to_id = uuid4(), uuid4(), uuid4()
        event = LedgerEventBuilder.payback_recorded(group_id, Decimal("30"), from_id, to_id)

        assert event.event_type == LedgerEventType.PAYBACK_RECORDED
        assert event.entity_id == group_id
        assert event.details["amount"] == "30"
        assert event.details["from_account_id"] == str(from_id)

    def test_builder_ledger_loaded_after_error(self):
        """Test that a recovered load is described as a reset."""
        event = LedgerEventBuilder.ledger_loaded(0, 0, 0, 0, recovered_from_error=True)
        assert event.details["recovered_from_error"] is True
        assert "reset" in event.description


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult.from_issues([
            ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message="Amount must be greater than zero",
                severity="error",
            ),
        ])
        assert result.is_valid is False
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult.from_issues([
            ValidationIssue(
                field="date",
                issue_type="future_date",
                message="Date in future",
                severity="warning",
            ),
        ])
        assert result.is_valid is True
        assert result.has_errors is False
        assert result.warnings == ["Date in future"]

    def test_issue_severity_is_restricted(self):
        """Test that unknown severities are rejected."""
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
