"""Tests for running-balance statements."""

from datetime import datetime
from decimal import Decimal

import pytest

from ledger.models.entities import TransactionType
from ledger.queries import PAYBACK_LABEL, build_statement


INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


@pytest.fixture
def ledger(engine, checking, visa, make_tx):
    """January opening income, a February card purchase and a payback."""
    engine.add(make_tx(100, INCOME, account=checking, purpose="Salary",
                       date=datetime(2026, 1, 31)))
    engine.add(make_tx(50, EXPENSE, account=visa, purpose="Shoes",
                       date=datetime(2026, 2, 5)))
    engine.record_payback(Decimal("50"), checking.id, visa.id,
                          note="Card bill", date=datetime(2026, 2, 20))
    return engine


class TestStatement:
    """Statement rows and balances."""

    def test_credit_leg_of_payback_is_hidden(self, ledger):
        statement = build_statement(ledger, datetime(2026, 2, 1), datetime(2026, 2, 28))

        assert len(statement.rows) == 2
        assert [r.label for r in statement.rows] == ["Expense", PAYBACK_LABEL]
        assert statement.rows[1].account_name == "Checking"
        assert statement.rows[1].note == "Card bill"

    def test_balances(self, ledger):
        """Test that the hidden leg still moves the running balance."""
        statement = build_statement(ledger, datetime(2026, 2, 1), datetime(2026, 2, 28))

        assert statement.opening_balance == Decimal("100")
        assert statement.rows[0].running_balance == Decimal("50")
        assert statement.closing_balance == Decimal("50")
        assert statement.closing_balance == ledger.balance_as_of(datetime(2026, 2, 28))

    def test_rows_ascending(self, ledger):
        statement = build_statement(ledger, datetime(2026, 1, 1), datetime(2026, 12, 31))
        dates = [r.date for r in statement.rows]
        assert dates == sorted(dates)
        assert statement.opening_balance == Decimal("0")
        assert statement.rows[0].note == "Salary"

    def test_empty_range(self, ledger):
        statement = build_statement(ledger, datetime(2025, 1, 1), datetime(2025, 1, 31))
        assert statement.rows == []
        assert statement.opening_balance == statement.closing_balance == Decimal("0")

    def test_end_before_start(self, ledger):
        with pytest.raises(ValueError):
            build_statement(ledger, datetime(2026, 2, 1), datetime(2026, 1, 1))
