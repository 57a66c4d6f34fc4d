"""
Running-Balance Statement

Builds the rows a report renderer (PDF, HTML, terminal) needs for a
date-range statement. Rendering itself is not done here.

Presentation rule for paybacks:
- the credit-side leg (income on a credit account) gets no row
- the checking-side leg is labelled "Payback"
The suppressed leg still moves the running balance, so the closing
balance always equals the ledger balance at the end of the range.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ledger.calendar import as_local_naive
from ledger.models.entities import AccountType

if TYPE_CHECKING:
    from ledger.engine import LedgerEngine


PAYBACK_LABEL = "Payback"


class StatementRow(BaseModel):
    """One visible statement line."""

    transaction_id: UUID
    date: datetime
    account_name: str
    label: str = Field(..., description="Income, Expense or Payback")
    amount: Decimal
    category_name: str
    note: str
    running_balance: Decimal


class Statement(BaseModel):
    """Statement for an inclusive date range."""

    start: datetime
    end: datetime
    opening_balance: Decimal
    closing_balance: Decimal
    rows: list[StatementRow] = Field(default_factory=list)


def build_statement(engine: "LedgerEngine", start: datetime, end: datetime) -> Statement:
    """
    Build a statement covering start..end inclusive, across all accounts.

    The opening balance covers everything strictly before start.
    """
    start, end = as_local_naive(start), as_local_naive(end)
    if end < start:
        raise ValueError("Statement end is before start")

    opening = sum(
        (t.signed_amount for t in engine.transactions if t.date < start),
        Decimal("0"),
    )
    running = opening
    rows = []

    for tx in engine.transactions_between(start, end):
        running += tx.signed_amount
        account_type: Optional[AccountType] = engine.account_type_for(tx.account_id)

        if tx.is_payback and account_type is AccountType.CREDIT:
            continue

        if tx.is_payback and account_type is AccountType.CHECKING:
            label = PAYBACK_LABEL
        else:
            label = tx.type.display_name

        rows.append(StatementRow(
            transaction_id=tx.id,
            date=tx.date,
            account_name=engine.account_name(tx.account_id) or "",
            label=label,
            amount=tx.amount,
            category_name=engine.category_name(tx.category_id) or "",
            note=tx.note or tx.purpose,
            running_balance=running,
        ))

    return Statement(
        start=start,
        end=end,
        opening_balance=opening,
        closing_balance=running,
        rows=rows,
    )
