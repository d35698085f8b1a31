"""Validation package."""

from budget_integrity.validation.allocation import AllocationValidator
from budget_integrity.validation.balance import BalanceChecker
from budget_integrity.validation.credit import (
    BalanceShortfall,
    CreditPaymentSolver,
    MaximumPayable,
    PayableAmount,
)
from budget_integrity.validation.imports import ImportReconciler, parse_import_date
from budget_integrity.validation.integrity import IntegrityChecker
from budget_integrity.validation.schema import check_schema
from budget_integrity.validation.service import ValidationService
from budget_integrity.validation.transaction import TransactionValidator

__all__ = [
    "AllocationValidator",
    "BalanceChecker",
    "BalanceShortfall",
    "CreditPaymentSolver",
    "ImportReconciler",
    "IntegrityChecker",
    "MaximumPayable",
    "PayableAmount",
    "TransactionValidator",
    "ValidationService",
    "check_schema",
    "parse_import_date",
]
