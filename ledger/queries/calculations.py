"""
Derived Ledger Computations

DESIGN DECISION: Balances, dues and budget figures are never stored.
They are recomputed from the flat collections on every call.
Every function here is pure: same inputs, same answer, no side effects.

A personal ledger is small, so linear scans are the right tool.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from ledger.calendar import MonthKeyFunc, as_local_naive, month_key_for
from ledger.models.entities import (
    Account,
    AccountType,
    BudgetAllocation,
    Transaction,
    TransactionType,
)


ZERO = Decimal("0")


def _sum(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


# =============================================================================
# BALANCES
# =============================================================================

def balance_for_account(transactions: Iterable[Transaction], account_id: UUID) -> Decimal:
    """Income minus expense over the transactions of one account."""
    return _sum(t.signed_amount for t in transactions if t.account_id == account_id)


def total_for_account_type(
    accounts: Iterable[Account],
    transactions: Sequence[Transaction],
    account_type: AccountType,
) -> Decimal:
    """Sum of balances across all accounts of a type."""
    return _sum(
        balance_for_account(transactions, a.id)
        for a in accounts
        if a.type == account_type
    )


def due_amount_for_credit_account(
    transactions: Iterable[Transaction],
    account_id: UUID,
) -> Decimal:
    """
    Outstanding balance on a credit account.

    Expenses minus payments (incomes), floored at zero. Paying more than
    is owed does not produce a negative due.
    """
    expenses = ZERO
    payments = ZERO
    for t in transactions:
        if t.account_id != account_id:
            continue
        if t.type is TransactionType.EXPENSE:
            expenses += t.amount
        else:
            payments += t.amount
    return max(ZERO, expenses - payments)


def total_owe_balance(
    accounts: Iterable[Account],
    transactions: Sequence[Transaction],
) -> Decimal:
    """Sum of dues across all credit accounts."""
    return _sum(
        due_amount_for_credit_account(transactions, a.id)
        for a in accounts
        if a.type is AccountType.CREDIT
    )


def total_income(transactions: Iterable[Transaction]) -> Decimal:
    return _sum(t.amount for t in transactions if t.type is TransactionType.INCOME)


def total_expense(transactions: Iterable[Transaction]) -> Decimal:
    return _sum(t.amount for t in transactions if t.type is TransactionType.EXPENSE)


def balance_as_of(
    transactions: Iterable[Transaction],
    cutoff: datetime,
    account_id: Optional[UUID] = None,
) -> Decimal:
    """
    Balance up to and including the cutoff.

    Across all accounts unless an account_id is given.
    """
    cutoff = as_local_naive(cutoff)
    return _sum(
        t.signed_amount
        for t in transactions
        if t.date <= cutoff and (account_id is None or t.account_id == account_id)
    )


# =============================================================================
# BUDGETS
# =============================================================================

def find_allocation(
    allocations: Iterable[BudgetAllocation],
    category_id: UUID,
    month_key: str,
) -> Optional[BudgetAllocation]:
    for allocation in allocations:
        if allocation.category_id == category_id and allocation.month_key == month_key:
            return allocation
    return None


def budget_for(
    allocations: Iterable[BudgetAllocation],
    category_id: UUID,
    month_key: str,
) -> Optional[Decimal]:
    """Budgeted amount, or None when the category has no allocation that month."""
    allocation = find_allocation(allocations, category_id, month_key)
    return allocation.amount if allocation else None


def spent_for_category_month(
    transactions: Iterable[Transaction],
    category_id: UUID,
    month_key: str,
    month_key_func: MonthKeyFunc = month_key_for,
) -> Decimal:
    """Total expenses in a category for one month. Incomes are ignored."""
    return _sum(
        t.amount
        for t in transactions
        if t.type is TransactionType.EXPENSE
        and t.category_id == category_id
        and month_key_func(t.date) == month_key
    )


def remaining_for_category_month(
    allocations: Iterable[BudgetAllocation],
    transactions: Iterable[Transaction],
    category_id: UUID,
    month_key: str,
    month_key_func: MonthKeyFunc = month_key_for,
) -> Optional[Decimal]:
    """
    Budget minus spent.

    Returns None when no allocation exists. None means "no budget" and is
    not the same as a zero budget.
    """
    budget = budget_for(allocations, category_id, month_key)
    if budget is None:
        return None
    return budget - spent_for_category_month(
        transactions, category_id, month_key, month_key_func
    )


def is_category_over_budget(
    allocations: Iterable[BudgetAllocation],
    transactions: Iterable[Transaction],
    category_id: UUID,
    month_key: str,
    month_key_func: MonthKeyFunc = month_key_for,
) -> bool:
    """Spent exceeds budget. Always False without an allocation."""
    budget = budget_for(allocations, category_id, month_key)
    if budget is None:
        return False
    spent = spent_for_category_month(transactions, category_id, month_key, month_key_func)
    return spent > budget


# =============================================================================
# PAYBACK GROUPS
# =============================================================================

def payback_groups(transactions: Iterable[Transaction]) -> dict[UUID, tuple[UUID, ...]]:
    """Map each payback group id to the ids of its transactions."""
    groups: dict[UUID, list[UUID]] = {}
    for t in transactions:
        if t.payback_group_id is not None:
            groups.setdefault(t.payback_group_id, []).append(t.id)
    return {group_id: tuple(ids) for group_id, ids in groups.items()}


def transactions_in_group(
    transactions: Iterable[Transaction],
    group_id: UUID,
) -> list[Transaction]:
    return [t for t in transactions if t.payback_group_id == group_id]


def payback_counterparts(
    transactions: Sequence[Transaction],
    transaction_id: UUID,
) -> list[Transaction]:
    """The other leg(s) of a transaction's payback group; empty if none."""
    source = next((t for t in transactions if t.id == transaction_id), None)
    if source is None or source.payback_group_id is None:
        return []
    return [
        t for t in transactions_in_group(transactions, source.payback_group_id)
        if t.id != transaction_id
    ]


# =============================================================================
# RANGES
# =============================================================================

def transactions_between(
    transactions: Iterable[Transaction],
    start: datetime,
    end: datetime,
) -> list[Transaction]:
    """Transactions dated within [start, end], oldest first."""
    start, end = as_local_naive(start), as_local_naive(end)
    selected = [t for t in transactions if start <= t.date <= end]
    selected.sort(key=lambda t: t.date)
    return selected
