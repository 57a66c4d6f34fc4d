"""Derived computations and report queries."""

from ledger.queries import calculations
from ledger.queries.statement import PAYBACK_LABEL, Statement, StatementRow, build_statement

__all__ = ["PAYBACK_LABEL", "Statement", "StatementRow", "build_statement", "calculations"]
