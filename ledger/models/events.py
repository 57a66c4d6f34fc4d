"""
Change Event Models for the Personal Ledger

Every successful mutation of the ledger publishes one event.
Observers (UI layers, the change logger) use these to refresh or trace.

DESIGN DECISION: Events are notifications, not history. They are never
persisted and the ledger cannot be rebuilt from them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of ledger changes."""
    # Accounts
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Categories and budgets
    CATEGORY_ADDED = "category_added"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"
    BUDGET_SET = "budget_set"
    ALLOCATION_DELETED = "allocation_deleted"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTIONS_ADDED = "transactions_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    PAYBACK_RECORDED = "payback_recorded"

    # Lifecycle
    LEDGER_LOADED = "ledger_loaded"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerEvent(BaseModel):
    """A single ledger change notification."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the change happened (UTC)"
    )
    event_type: LedgerEventType

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'transaction')"
    )
    entity_id: Optional[UUID] = None

    description: str = Field(..., description="Human-readable summary of the change")
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.account_added(account_id, name, "checking")
        event = LedgerEventBuilder.payback_recorded(group_id, amount, ...)
    """

    @staticmethod
    def account_added(account_id: UUID, name: str, account_type: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ACCOUNT_ADDED,
            entity_type="account",
            entity_id=account_id,
            description=f"Account added: {name}",
            details={"name": name, "type": account_type},
        )

    @staticmethod
    def account_updated(account_id: UUID, name: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ACCOUNT_UPDATED,
            entity_type="account",
            entity_id=account_id,
            description=f"Account updated: {name}",
            details={"name": name},
        )

    @staticmethod
    def account_deleted(account_id: UUID, removed_transactions: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ACCOUNT_DELETED,
            entity_type="account",
            entity_id=account_id,
            description=f"Account deleted with {removed_transactions} transactions",
            details={"removed_transactions": removed_transactions},
        )

    @staticmethod
    def category_added(category_id: UUID, name: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.CATEGORY_ADDED,
            entity_type="category",
            entity_id=category_id,
            description=f"Category added: {name}",
            details={"name": name},
        )

    @staticmethod
    def category_updated(category_id: UUID, name: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.CATEGORY_UPDATED,
            entity_type="category",
            entity_id=category_id,
            description=f"Category updated: {name}",
            details={"name": name},
        )

    @staticmethod
    def category_deleted(
        category_id: UUID,
        removed_allocations: int,
        cleared_transactions: int,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.CATEGORY_DELETED,
            entity_type="category",
            entity_id=category_id,
            description="Category deleted",
            details={
                "removed_allocations": removed_allocations,
                "cleared_transactions": cleared_transactions,
            },
        )

    @staticmethod
    def budget_set(
        allocation_id: UUID,
        category_id: UUID,
        month_key: str,
        amount: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.BUDGET_SET,
            entity_type="allocation",
            entity_id=allocation_id,
            description=f"Budget set for {month_key}: {amount}",
            details={
                "category_id": str(category_id),
                "month_key": month_key,
                "amount": str(amount),
            },
        )

    @staticmethod
    def allocation_deleted(allocation_id: UUID) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ALLOCATION_DELETED,
            entity_type="allocation",
            entity_id=allocation_id,
            description="Budget allocation deleted",
        )

    @staticmethod
    def transaction_added(transaction_id: UUID, tx_type: str, amount: Decimal) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction added: {tx_type} {amount}",
            details={"type": tx_type, "amount": str(amount)},
        )

    @staticmethod
    def transactions_added(transaction_ids: list[UUID]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTIONS_ADDED,
            entity_type="transaction",
            description=f"{len(transaction_ids)} transactions added",
            details={"transaction_ids": [str(t) for t in transaction_ids]},
        )

    @staticmethod
    def transaction_updated(transaction_id: UUID) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction updated",
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: UUID,
        removed_ids: list[UUID],
        payback_group_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{len(removed_ids)} transaction(s) deleted",
            details={
                "removed_ids": [str(t) for t in removed_ids],
                "payback_group_id": str(payback_group_id) if payback_group_id else None,
            },
        )

    @staticmethod
    def payback_recorded(
        group_id: UUID,
        amount: Decimal,
        from_account_id: UUID,
        to_account_id: UUID,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PAYBACK_RECORDED,
            entity_type="payback",
            entity_id=group_id,
            description=f"Payback recorded: {amount}",
            details={
                "amount": str(amount),
                "from_account_id": str(from_account_id),
                "to_account_id": str(to_account_id),
            },
        )

    @staticmethod
    def ledger_loaded(
        accounts: int,
        transactions: int,
        categories: int,
        allocations: int,
        recovered_from_error: bool = False,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_LOADED,
            entity_type="ledger",
            description=(
                "Ledger reset to empty after load failure"
                if recovered_from_error
                else f"Ledger loaded with {transactions} transactions"
            ),
            details={
                "accounts": accounts,
                "transactions": transactions,
                "categories": categories,
                "allocations": allocations,
                "recovered_from_error": recovered_from_error,
            },
        )
