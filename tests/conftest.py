"""Shared fixtures for ledger tests."""

from datetime import datetime
from decimal import Decimal

import pytest

from ledger.engine import LedgerEngine
from ledger.models.entities import AccountType, Transaction, TransactionType
from ledger.services.persistence import SnapshotWriter
from ledger.services.storage import InMemorySnapshotStorage


@pytest.fixture
def storage():
    return InMemorySnapshotStorage()


@pytest.fixture
def events():
    return []


@pytest.fixture
def engine(storage, events):
    """Engine with inline persistence into an in-memory storage."""
    engine = LedgerEngine(writer=SnapshotWriter(storage, background=False))
    engine.subscribe(events.append)
    return engine


@pytest.fixture
def checking(engine):
    return engine.add_account("Checking", AccountType.CHECKING)


@pytest.fixture
def visa(engine):
    return engine.add_account("Visa", AccountType.CREDIT)


@pytest.fixture
def make_tx():
    """Build a transaction with sensible defaults."""
    def _make(
        amount,
        tx_type=TransactionType.EXPENSE,
        account=None,
        date=None,
        category=None,
        **kwargs,
    ):
        return Transaction(
            amount=Decimal(str(amount)),
            type=tx_type,
            account_id=account.id if account is not None else None,
            date=date or datetime(2026, 2, 10, 12, 0),
            category_id=category.id if category is not None else None,
            **kwargs,
        )
    return _make
