"""Boundary validation package."""

from ledger.validation.validator import LedgerValidator, parse_amount

__all__ = ["LedgerValidator", "parse_amount"]
