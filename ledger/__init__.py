"""
Personal Ledger - Source Package

An in-memory personal finance ledger: checking and credit accounts,
income/expense transactions, monthly category budgets, and paybacks
that move money from a checking account onto a credit card.

DESIGN PRINCIPLES:
1. One owner of state: the LedgerEngine
2. Every mutation persists the whole snapshot
3. Derived values are computed, never stored
4. Payback legs live and die together
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Ledger Team"
