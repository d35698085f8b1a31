"""
Exceptions for Budget Integrity

Expected validation failures are NEVER raised: they come back as
ValidationResult values so a caller can show every problem at once.

The exceptions below are for programmer errors only, i.e. asking a helper
to do something that has no defined answer.
"""


class BudgetIntegrityError(Exception):
    """Base exception for the integrity engine."""
    pass


class AllocationError(BudgetIntegrityError):
    """An allocation cannot be built or rescaled from the given amounts."""
    pass
