"""
Finance Ledger - Source Package

A personal finance ledger engine: income and expense entries, derived
per-user totals, category budgets, trend buckets, and date-ranged reports
exported as spreadsheets or PDF documents.

DESIGN PRINCIPLES:
1. Money is Decimal, never float
2. Derived numbers are recomputed, never trusted
3. Fail early, fail visibly
4. Every change to a user's money is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Ledger Team"
