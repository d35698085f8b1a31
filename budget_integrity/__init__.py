"""
Budget Integrity - Allocation & Transaction Integrity Engine

Decides whether a proposed allocation, transaction, strategy, balance
state, or bulk import is internally consistent, so that every dollar in a
budget stays accounted for across its pools.

DESIGN PRINCIPLES:
1. Validators are pure: no I/O, no shared mutable state
2. Expected failures are values, never exceptions
3. Report everything in one pass; only a broken shape stops early
4. Tolerances are configuration, not magic numbers
"""

__version__ = "1.0.0"
__author__ = "Budget Integrity Team"
