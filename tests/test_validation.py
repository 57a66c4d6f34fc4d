"""Tests for boundary validation."""

from decimal import Decimal
from uuid import uuid4

import pytest

from ledger.models.entities import TransactionType
from ledger.validation import LedgerValidator, parse_amount


@pytest.fixture
def validator(engine):
    return LedgerValidator(engine)


class TestParseAmount:
    """Coercion of typed amounts."""

    @pytest.mark.parametrize("text, expected", [
        ("12.50", Decimal("12.50")),
        ("  7 ", Decimal("7")),
        ("1,234.5", Decimal("1234.5")),
        (3, Decimal("3")),
        (Decimal("0.1"), Decimal("0.1")),
    ])
    def test_valid_input(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc", "12..5", None, "NaN", "Infinity"])
    def test_invalid_input_gives_default(self, text):
        assert parse_amount(text) == Decimal("0")
        assert parse_amount(text, default=Decimal("-1")) == Decimal("-1")


class TestTransactionValidation:
    """Regular transactions."""

    def test_valid(self, validator, checking):
        result = validator.validate_transaction(Decimal("10"), checking.id)
        assert result.is_valid

    def test_zero_amount_and_missing_account(self, validator):
        result = validator.validate_transaction(Decimal("0"), None)

        assert result.error_count == 2
        assert {i.issue_type for i in result.issues} == {"not_positive", "missing"}

    def test_unknown_references(self, validator, checking):
        result = validator.validate_transaction(Decimal("5"), uuid4(), category_id=uuid4())
        assert [i.field for i in result.issues] == ["account_id", "category_id"]

    def test_budget_must_be_positive(self, validator):
        assert validator.validate_budget(Decimal("100")).is_valid
        assert not validator.validate_budget(Decimal("-1")).is_valid


class TestPaybackValidation:
    """Payback caps."""

    @pytest.fixture
    def funded(self, engine, checking, visa, make_tx):
        engine.add(make_tx(100, TransactionType.INCOME, account=checking))
        engine.add(make_tx(60, TransactionType.EXPENSE, account=visa))
        return engine

    def test_within_caps(self, validator, funded, checking, visa):
        assert validator.validate_payback(Decimal("60"), checking.id, visa.id).is_valid

    def test_exceeds_due(self, validator, funded, checking, visa):
        result = validator.validate_payback(Decimal("70"), checking.id, visa.id)
        assert [i.issue_type for i in result.issues] == ["exceeds_due"]

    def test_exceeds_available(self, validator, engine, checking, visa, make_tx):
        engine.add(make_tx(10, TransactionType.INCOME, account=checking))
        engine.add(make_tx(60, TransactionType.EXPENSE, account=visa))

        result = validator.validate_payback(Decimal("20"), checking.id, visa.id)

        assert [i.issue_type for i in result.issues] == ["exceeds_available"]

    def test_overdrawn_checking_has_nothing_available(self, validator, engine, checking, visa, make_tx):
        engine.add(make_tx(5, TransactionType.EXPENSE, account=checking))
        engine.add(make_tx(60, TransactionType.EXPENSE, account=visa))

        assert validator.max_payback(checking.id, visa.id) == Decimal("0")
        assert not validator.validate_payback(Decimal("1"), checking.id, visa.id).is_valid

    def test_wrong_account_types(self, validator, funded, checking, visa):
        result = validator.validate_payback(Decimal("10"), visa.id, checking.id)
        fields = {i.field for i in result.issues}
        assert {"from_checking_id", "to_credit_id"} <= fields

    def test_max_payback(self, validator, funded, checking, visa):
        assert validator.max_payback(checking.id, visa.id) == Decimal("60")

    def test_summary(self, validator, funded, checking, visa):
        ok = validator.validate_payback(Decimal("10"), checking.id, visa.id)
        bad = validator.validate_payback(Decimal("500"), checking.id, visa.id)

        assert validator.get_user_friendly_summary(ok) == "All checks passed."
        summary = validator.get_user_friendly_summary(bad)
        assert "exceeds available balance" in summary
        assert "exceeds amount owed" in summary
