"""
Ledger Engine

This module owns the ledger state and defines every way it can change:
1. CRUD for accounts, categories, budget allocations and transactions
2. Cascading deletes (account → transactions, category → allocations)
3. The payback pair (checking expense + credit income, one group id)

DESIGN DECISION: The engine enforces the structural rules only:
- transactions stay sorted newest first
- cascades keep references valid
- payback legs are added and deleted together
It does NOT validate user input (positive amounts, payback caps,
existing references). That is the job of the boundary; see
ledger.validation.

Each mutation builds its replacement collections and its event first, hands
the snapshot to the background writer, and only then installs the new state
and notifies observers. A mutation that fails leaves the ledger unchanged.
Reads never touch storage.
"""

from collections.abc import Iterable, Iterator
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from ledger.calendar import MonthKeyFunc, as_local_naive, month_key_for
from ledger.config import LedgerSettings, get_settings
from ledger.events import ChangeLogger, LedgerEventBus, LedgerObserver, configure_logging
from ledger.export import to_export_record
from ledger.models.entities import (
    Account,
    AccountType,
    BudgetAllocation,
    Category,
    LedgerSnapshot,
    Transaction,
    TransactionExportRecord,
    TransactionType,
)
from ledger.models.events import LedgerEvent, LedgerEventBuilder
from ledger.queries import calculations
from ledger.services.persistence import SnapshotWriter
from ledger.services.storage import (
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    SnapshotStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

PAYBACK_TO_PREFIX = "Payback to "
PAYMENT_FROM_PREFIX = "Payment from "


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _local_dated(tx: Transaction) -> Transaction:
    # model_copy skips validators, so an aware date can still arrive here
    if tx.date.tzinfo is None:
        return tx
    return tx.model_copy(update={"date": as_local_naive(tx.date)})


class LedgerEngine:
    """
    In-memory ledger with snapshot persistence.

    State:
    - accounts, categories, allocations in insertion order
    - transactions sorted by date, newest first

    Usage:
        engine = create_engine()
        checking = engine.add_account("Checking", AccountType.CHECKING)
        engine.subscribe(lambda event: refresh_ui())
    """

    def __init__(
        self,
        storage: Optional[SnapshotStorageInterface] = None,
        writer: Optional[SnapshotWriter] = None,
        bus: Optional[LedgerEventBus] = None,
        month_key_func: MonthKeyFunc = month_key_for,
        flush_timeout: Optional[float] = None,
    ):
        """
        Initialize an empty engine.

        Args:
            storage: Snapshot storage. Ignored when writer is given.
                    If both are None, an in-memory storage is used.
            writer: Snapshot writer to submit mutations to.
            bus: Event bus for change notifications.
            month_key_func: Calendar used to bucket transactions by month.
            flush_timeout: Default wait in close() for pending writes.
        """
        if writer is None:
            writer = SnapshotWriter(storage or InMemorySnapshotStorage(), background=False)
        self._writer = writer
        self._bus = bus or LedgerEventBus()
        self._month_key_for = month_key_func
        self._flush_timeout = flush_timeout

        self._accounts: list[Account] = []
        self._items: list[Transaction] = []
        self._categories: list[Category] = []
        self._allocations: list[BudgetAllocation] = []

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def accounts(self) -> tuple[Account, ...]:
        return tuple(self._accounts)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """All transactions, newest first."""
        return tuple(self._items)

    @property
    def categories(self) -> tuple[Category, ...]:
        return tuple(self._categories)

    @property
    def allocations(self) -> tuple[BudgetAllocation, ...]:
        return tuple(self._allocations)

    @property
    def bus(self) -> LedgerEventBus:
        return self._bus

    @property
    def writer(self) -> SnapshotWriter:
        return self._writer

    def snapshot(self) -> LedgerSnapshot:
        """Immutable copy of the full current state."""
        return LedgerSnapshot(
            accounts=list(self._accounts),
            items=list(self._items),
            categories=list(self._categories),
            allocations=list(self._allocations),
        )

    def month_key_for(self, moment: datetime) -> str:
        return self._month_key_for(moment)

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, observer: LedgerObserver):
        """Register a change observer; returns an unsubscribe callable."""
        return self._bus.subscribe(observer)

    def unsubscribe(self, observer: LedgerObserver) -> None:
        self._bus.unsubscribe(observer)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> LedgerSnapshot:
        """
        Replace in-memory state with the stored snapshot.

        A missing snapshot gives an empty ledger. A corrupt or unreadable
        one also gives an empty ledger: there is no partial recovery.
        """
        recovered = False
        try:
            snapshot = self._writer.storage.load()
        except StorageError as e:
            logger.error("ledger_load_failed", error=str(e), error_type=type(e).__name__)
            snapshot = LedgerSnapshot()
            recovered = True

        self._accounts = list(snapshot.accounts)
        self._items = self._sorted(snapshot.items)
        self._categories = list(snapshot.categories)
        self._allocations = list(snapshot.allocations)

        self._bus.publish(LedgerEventBuilder.ledger_loaded(
            accounts=len(self._accounts),
            transactions=len(self._items),
            categories=len(self._categories),
            allocations=len(self._allocations),
            recovered_from_error=recovered,
        ))
        return snapshot

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for pending snapshot writes."""
        return self._writer.flush(timeout)

    def close(self, timeout: Optional[float] = None) -> bool:
        """
        Flush and stop the background writer.

        The engine is read-only afterwards: every mutation raises
        RuntimeError and leaves the in-memory state untouched.
        """
        return self._writer.close(timeout if timeout is not None else self._flush_timeout)

    def _commit(
        self,
        event: LedgerEvent,
        *,
        accounts: Optional[list[Account]] = None,
        items: Optional[list[Transaction]] = None,
        categories: Optional[list[Category]] = None,
        allocations: Optional[list[BudgetAllocation]] = None,
    ) -> None:
        """
        Install new collections, persist them and notify observers.

        Callers build the replacement collections and the event up front.
        Nothing changes in memory until the writer has accepted the snapshot,
        so a failure anywhere before that point leaves the ledger as it was.
        """
        accounts = self._accounts if accounts is None else accounts
        items = self._items if items is None else self._sorted(items)
        categories = self._categories if categories is None else categories
        allocations = self._allocations if allocations is None else allocations

        self._writer.submit(LedgerSnapshot(
            accounts=accounts,
            items=items,
            categories=categories,
            allocations=allocations,
        ))
        self._accounts = accounts
        self._items = items
        self._categories = categories
        self._allocations = allocations
        self._bus.publish(event)

    @staticmethod
    def _sorted(items: Iterable[Transaction]) -> list[Transaction]:
        # sorted() is stable: equal dates keep insertion order
        return sorted(items, key=lambda t: t.date, reverse=True)

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def add_account(self, name: str, account_type: AccountType) -> Account:
        account = Account(name=name, type=account_type)
        event = LedgerEventBuilder.account_added(account.id, account.name, account.type.value)
        self._commit(event, accounts=self._accounts + [account])
        return account

    def update_account(self, account: Account) -> None:
        idx = self._index_of(self._accounts, account.id)
        if idx is None:
            return
        accounts = list(self._accounts)
        accounts[idx] = account
        self._commit(
            LedgerEventBuilder.account_updated(account.id, account.name),
            accounts=accounts,
        )

    def delete_account(self, account_id: UUID) -> None:
        """
        Delete an account and every transaction booked on it.

        Callers holding a selected account must revalidate it afterwards.
        """
        if self._index_of(self._accounts, account_id) is None:
            return
        accounts = [a for a in self._accounts if a.id != account_id]
        items = [t for t in self._items if t.account_id != account_id]
        event = LedgerEventBuilder.account_deleted(
            account_id, removed_transactions=len(self._items) - len(items)
        )
        self._commit(event, accounts=accounts, items=items)

    def get_account(self, account_id: Optional[UUID]) -> Optional[Account]:
        if account_id is None:
            return None
        return next((a for a in self._accounts if a.id == account_id), None)

    def account_name(self, account_id: Optional[UUID]) -> Optional[str]:
        account = self.get_account(account_id)
        return account.name if account else None

    def account_type_for(self, account_id: Optional[UUID]) -> Optional[AccountType]:
        account = self.get_account(account_id)
        return account.type if account else None

    def checking_accounts(self) -> list[Account]:
        return [a for a in self._accounts if a.type is AccountType.CHECKING]

    def credit_accounts(self) -> list[Account]:
        return [a for a in self._accounts if a.type is AccountType.CREDIT]

    # -------------------------------------------------------------------------
    # Categories & allocations
    # -------------------------------------------------------------------------

    def add_category(self, name: str) -> Category:
        category = Category(name=name)
        event = LedgerEventBuilder.category_added(category.id, category.name)
        self._commit(event, categories=self._categories + [category])
        return category

    def update_category(self, category: Category) -> None:
        idx = self._index_of(self._categories, category.id)
        if idx is None:
            return
        categories = list(self._categories)
        categories[idx] = category
        self._commit(
            LedgerEventBuilder.category_updated(category.id, category.name),
            categories=categories,
        )

    def delete_category(self, category_id: UUID) -> None:
        """
        Delete a category.

        Its allocations are removed; transactions pointing at it survive
        with category_id cleared.
        """
        if self._index_of(self._categories, category_id) is None:
            return

        allocations = [a for a in self._allocations if a.category_id != category_id]

        items = []
        cleared = 0
        for tx in self._items:
            if tx.category_id == category_id:
                tx = tx.model_copy(update={"category_id": None})
                cleared += 1
            items.append(tx)

        event = LedgerEventBuilder.category_deleted(
            category_id,
            removed_allocations=len(self._allocations) - len(allocations),
            cleared_transactions=cleared,
        )
        self._commit(
            event,
            categories=[c for c in self._categories if c.id != category_id],
            allocations=allocations,
            items=items,
        )

    def get_category(self, category_id: Optional[UUID]) -> Optional[Category]:
        if category_id is None:
            return None
        return next((c for c in self._categories if c.id == category_id), None)

    def category_name(self, category_id: Optional[UUID]) -> Optional[str]:
        category = self.get_category(category_id)
        return category.name if category else None

    def set_budget(self, category_id: UUID, month_key: str, amount: Decimal) -> BudgetAllocation:
        """
        Upsert the budget for (category_id, month_key).

        An existing allocation keeps its id and gets the new amount.
        The amount is not checked; zero and negative budgets are stored.
        """
        amount = _to_decimal(amount)
        allocations = list(self._allocations)
        for i, existing in enumerate(allocations):
            if existing.category_id == category_id and existing.month_key == month_key:
                allocation = existing.model_copy(update={"amount": amount})
                allocations[i] = allocation
                break
        else:
            allocation = BudgetAllocation(
                category_id=category_id,
                month_key=month_key,
                amount=amount,
            )
            allocations.append(allocation)

        event = LedgerEventBuilder.budget_set(allocation.id, category_id, month_key, amount)
        self._commit(event, allocations=allocations)
        return allocation

    def budget_for(self, category_id: UUID, month_key: str) -> Optional[Decimal]:
        return calculations.budget_for(self._allocations, category_id, month_key)

    def delete_allocation(self, allocation_id: UUID) -> None:
        if self._index_of(self._allocations, allocation_id) is None:
            return
        self._commit(
            LedgerEventBuilder.allocation_deleted(allocation_id),
            allocations=[a for a in self._allocations if a.id != allocation_id],
        )

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def add(self, transaction: Transaction) -> None:
        """Insert a transaction; the newest-first order is restored."""
        transaction = _local_dated(transaction)
        event = LedgerEventBuilder.transaction_added(
            transaction.id, transaction.type.value, transaction.amount
        )
        self._commit(event, items=self._items + [transaction])

    def add_multiple(self, transactions: Iterable[Transaction]) -> None:
        """Insert a batch as one mutation: one snapshot, one event."""
        batch = [_local_dated(t) for t in transactions]
        if not batch:
            return
        event = LedgerEventBuilder.transactions_added([t.id for t in batch])
        self._commit(event, items=self._items + batch)

    def update(self, transaction: Transaction) -> None:
        """Replace a transaction by id. Unknown ids are ignored."""
        transaction = _local_dated(transaction)
        idx = self._index_of(self._items, transaction.id)
        if idx is None:
            return
        items = list(self._items)
        items[idx] = transaction
        self._commit(LedgerEventBuilder.transaction_updated(transaction.id), items=items)

    def delete(self, transaction_id: UUID) -> None:
        """
        Delete a transaction.

        If it belongs to a payback group, every transaction of that group
        is deleted with it, so no unmatched leg is ever left behind.
        """
        tx = self.get_transaction(transaction_id)
        if tx is None:
            return

        group_id = tx.payback_group_id
        if group_id is not None:
            removed = [t.id for t in self._items if t.payback_group_id == group_id]
            items = [t for t in self._items if t.payback_group_id != group_id]
        else:
            removed = [transaction_id]
            items = [t for t in self._items if t.id != transaction_id]

        event = LedgerEventBuilder.transaction_deleted(
            transaction_id, removed, payback_group_id=group_id
        )
        self._commit(event, items=items)

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        return next((t for t in self._items if t.id == transaction_id), None)

    # -------------------------------------------------------------------------
    # Payback
    # -------------------------------------------------------------------------

    def record_payback(
        self,
        amount: Decimal,
        from_checking_id: UUID,
        to_credit_id: UUID,
        note: str = "",
        date: Optional[datetime] = None,
    ) -> tuple[Transaction, Transaction]:
        """
        Record a payment from a checking account onto a credit account.

        Creates two transactions sharing a fresh payback group id:
        an expense on the checking account and an income on the credit
        account, same amount, date and note. Both are inserted as one batch.

        No checks are made here. Callers must ensure amount > 0, that it
        does not exceed the checking balance, and that it does not exceed
        the credit account's due amount.

        Returns:
            (checking_expense, credit_income)
        """
        group_id = uuid4()
        when = as_local_naive(date) if date is not None else datetime.now()
        amount = _to_decimal(amount)
        note = note or ""

        expense = Transaction(
            amount=amount,
            purpose=PAYBACK_TO_PREFIX + (self.account_name(to_credit_id) or "Credit"),
            note=note,
            type=TransactionType.EXPENSE,
            account_id=from_checking_id,
            date=when,
            category_id=None,
            payback_group_id=group_id,
        )
        income = Transaction(
            amount=amount,
            purpose=PAYMENT_FROM_PREFIX + (self.account_name(from_checking_id) or "Checking"),
            note=note,
            type=TransactionType.INCOME,
            account_id=to_credit_id,
            date=when,
            category_id=None,
            payback_group_id=group_id,
        )

        event = LedgerEventBuilder.payback_recorded(
            group_id, amount, from_checking_id, to_credit_id
        )
        self._commit(event, items=self._items + [expense, income])
        return expense, income

    def payback_groups(self) -> dict[UUID, tuple[UUID, ...]]:
        return calculations.payback_groups(self._items)

    def transactions_in_group(self, group_id: UUID) -> list[Transaction]:
        return calculations.transactions_in_group(self._items, group_id)

    def payback_counterparts(self, transaction_id: UUID) -> list[Transaction]:
        return calculations.payback_counterparts(self._items, transaction_id)

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    def balance_for_account(self, account_id: UUID) -> Decimal:
        return calculations.balance_for_account(self._items, account_id)

    def total_for_account_type(self, account_type: AccountType) -> Decimal:
        return calculations.total_for_account_type(self._accounts, self._items, account_type)

    def due_amount_for_credit_account(self, account_id: UUID) -> Decimal:
        return calculations.due_amount_for_credit_account(self._items, account_id)

    def total_owe_balance(self) -> Decimal:
        return calculations.total_owe_balance(self._accounts, self._items)

    def spent_for_category_month(self, category_id: UUID, month_key: str) -> Decimal:
        return calculations.spent_for_category_month(
            self._items, category_id, month_key, self._month_key_for
        )

    def remaining_for_category_month(self, category_id: UUID, month_key: str) -> Optional[Decimal]:
        return calculations.remaining_for_category_month(
            self._allocations, self._items, category_id, month_key, self._month_key_for
        )

    def is_category_over_budget(self, category_id: UUID, month_key: str) -> bool:
        return calculations.is_category_over_budget(
            self._allocations, self._items, category_id, month_key, self._month_key_for
        )

    def total_income(self) -> Decimal:
        return calculations.total_income(self._items)

    def total_expense(self) -> Decimal:
        return calculations.total_expense(self._items)

    def net_balance(self) -> Decimal:
        return self.total_income() - self.total_expense()

    # -------------------------------------------------------------------------
    # Report & export queries
    # -------------------------------------------------------------------------

    def transactions_between(self, start: datetime, end: datetime) -> list[Transaction]:
        """Transactions within [start, end], oldest first."""
        return calculations.transactions_between(self._items, start, end)

    def balance_as_of(self, cutoff: datetime, account_id: Optional[UUID] = None) -> Decimal:
        return calculations.balance_as_of(self._items, cutoff, account_id)

    def export_records(self) -> Iterator[TransactionExportRecord]:
        """One flattened record per transaction, in ledger order."""
        names = {a.id: a.name for a in self._accounts}
        for tx in list(self._items):
            yield to_export_record(tx, names.get(tx.account_id))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _index_of(collection: list, entity_id: UUID) -> Optional[int]:
        for idx, entity in enumerate(collection):
            if entity.id == entity_id:
                return idx
        return None


def create_engine(
    settings: Optional[LedgerSettings] = None,
    storage: Optional[SnapshotStorageInterface] = None,
) -> LedgerEngine:
    """
    Factory function to create a ready-to-use engine.

    Configures logging, wires storage → writer → engine → change logger,
    and loads the stored snapshot.

    Args:
        settings: Settings to use; the cached settings if None.
        storage: Storage override; the JSON file from settings if None.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    storage = storage or JsonFileSnapshotStorage(settings.data_file_path)
    writer = SnapshotWriter(storage, background=settings.background_persistence)
    engine = LedgerEngine(writer=writer, flush_timeout=settings.flush_timeout_seconds)
    ChangeLogger(engine.bus)
    engine.load()

    logger.info(
        "ledger_ready",
        accounts=len(engine.accounts),
        transactions=len(engine.transactions),
    )
    return engine
