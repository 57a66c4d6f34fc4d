"""
Core Data Models for the Personal Ledger

These models define the strict schemas for everything the ledger stores.
They are designed to:
1. Enforce type safety at runtime
2. Be immutable once created (changes go through model_copy)
3. Serialize to the JSON snapshot without custom code

DESIGN DECISION: Money is Decimal, never float. Direction of a transaction
is carried by its type, so amounts are always non-negative magnitudes.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ledger.calendar import as_local_naive


MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Kind of account. Credit accounts accrue a due balance."""
    CHECKING = "checking"
    CREDIT = "credit"

    @property
    def display_name(self) -> str:
        return "Checking" if self is AccountType.CHECKING else "Credit"


class TransactionType(str, Enum):
    """Direction of a transaction relative to its account."""
    EXPENSE = "expense"
    INCOME = "income"

    @property
    def display_name(self) -> str:
        return "Income" if self is TransactionType.INCOME else "Expense"


# =============================================================================
# ENTITIES
# =============================================================================

class Account(BaseModel):
    """
    A checking or credit account.

    Names are not unique; the id is the identity.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., description="Display name")
    type: AccountType


class Category(BaseModel):
    """A budget category (e.g. Groceries)."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str


class BudgetAllocation(BaseModel):
    """
    Budgeted amount for one category in one month.

    The ledger keeps at most one allocation per (category_id, month_key).
    The amount is deliberately not sign-checked here.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    category_id: UUID
    month_key: str = Field(
        ...,
        pattern=MONTH_KEY_PATTERN,
        description="Calendar month as YYYY-MM",
    )
    amount: Decimal


class Transaction(BaseModel):
    """
    A single income or expense entry.

    account_id and category_id are nullable: the account may be unknown
    and categories can be deleted out from under a transaction.
    payback_group_id links the two legs of a payback.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative magnitude; direction comes from type",
    )
    purpose: str = ""
    note: str = ""
    type: TransactionType
    account_id: Optional[UUID] = None
    date: datetime
    category_id: Optional[UUID] = None
    payback_group_id: Optional[UUID] = None

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        """Dates are stored as naive local time."""
        return as_local_naive(v)

    @property
    def is_payback(self) -> bool:
        return self.payback_group_id is not None

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it affects an account balance."""
        return self.amount if self.type is TransactionType.INCOME else -self.amount


# =============================================================================
# PERSISTED DOCUMENT
# =============================================================================

class LedgerSnapshot(BaseModel):
    """
    The full persisted state of a ledger.

    This is the single document written on every mutation. The key for
    transactions is "items" to stay compatible with existing data files.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    accounts: list[Account] = Field(default_factory=list)
    items: list[Transaction] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    allocations: list[BudgetAllocation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.accounts or self.items or self.categories or self.allocations)


class TransactionExportRecord(BaseModel):
    """
    One flattened transaction line for export.

    Field order matches the exported column order.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    date: str
    type: str
    amount: str
    purpose: str
    note: str
    account: str
    category: str
    payback_group_id: str

    def to_row(self) -> list[str]:
        return [
            self.id,
            self.date,
            self.type,
            self.amount,
            self.purpose,
            self.note,
            self.account,
            self.category,
            self.payback_group_id,
        ]
