"""
Expense Ledger - Source Package

A small personal-finance ledger: recurring monthly expenses, an income
figure and the net worth derived from them, kept in one JSON file.

DESIGN PRINCIPLES:
1. One ledger, one lock
2. Fail visibly, never crash: every command reports its outcome
3. No I/O while the ledger is locked
4. Persistence only when asked
"""

__version__ = "1.0.0"
__author__ = "Expense Ledger Team"
