"""
Data Models Package

This package contains all Pydantic models used by the Personal Ledger.
Everything the engine stores or publishes conforms to these schemas.
"""

from ledger.models.entities import (
    MONTH_KEY_PATTERN,
    Account,
    AccountType,
    BudgetAllocation,
    Category,
    LedgerSnapshot,
    Transaction,
    TransactionExportRecord,
    TransactionType,
)
from ledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)
from ledger.models.validation import (
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Ledger entities
    "MONTH_KEY_PATTERN",
    "Account",
    "AccountType",
    "BudgetAllocation",
    "Category",
    "LedgerSnapshot",
    "Transaction",
    "TransactionExportRecord",
    "TransactionType",
    # Change events
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
