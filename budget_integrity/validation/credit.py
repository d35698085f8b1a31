"""
Credit Payment Solver

A credit card payment is a transfer INTO a credit channel. Money for it is
drawn from pools, and each pool can only pay down the debt it ran up:

    payable(pool) = max(0, min(available(pool), debt(pool)))
    max payment   = sum of payable(pool) over the source allocation's pools

This is a per-pool capped sum, not one global minimum. A pool missing from
either mapping contributes nothing.
"""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from budget_integrity.config import ValidationSettings
from budget_integrity.models.allocation import AllocationBreakdown
from budget_integrity.models.base import read_field, read_items
from budget_integrity.models.validation import (
    ValidationErrorCode,
    ValidationIssue,
    ValidationResult,
)
from budget_integrity.validation.transaction import TransactionValidator

_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PayableAmount(BaseModel):
    """How much one pool can pay toward its debt."""
    model_config = _CONFIG

    pool_id: str
    payable_amount: float


class MaximumPayable(BaseModel):
    """Maximum payable amount with its per-pool breakdown."""
    model_config = _CONFIG

    max_amount: float = 0.0
    breakdown: list[PayableAmount] = Field(default_factory=list)


class BalanceShortfall(BaseModel):
    """An allocation item asking for more than its pool holds."""
    model_config = _CONFIG

    pool_id: str
    requested: float
    available: float


class CreditPaymentSolver:
    """Validates credit card payments and computes how much can be paid."""

    def __init__(
        self,
        settings: Optional[ValidationSettings] = None,
        transaction_validator: Optional[TransactionValidator] = None,
    ):
        self._transactions = transaction_validator or TransactionValidator(settings)

    def validate_credit_payment(self, transfer: Any) -> ValidationResult:
        """
        Validate a credit payment transfer.

        All transfer rules apply, and the payment must say which pools it
        is paid from.
        """
        errors = list(self._transactions.validate_transfer_transaction(transfer).errors)

        source = read_field(transfer, "source_allocation")
        if not read_items(source):
            errors.append(ValidationIssue(
                field="sourceAllocation",
                code=ValidationErrorCode.CREDIT_PAYMENT_INVALID_SOURCE,
                message="Credit payment must specify source allocation breakdown",
            ))

        return ValidationResult.from_issues(errors)

    def calculate_max_credit_payment(
        self,
        source_allocation: AllocationBreakdown,
        available_balances: Mapping[str, float],
        credit_debt: Mapping[str, float],
    ) -> float:
        """
        Maximum amount payable from the source allocation's pools.

        Args:
            source_allocation: Pools the payment would be drawn from
            available_balances: Available amount per pool ID
            credit_debt: Outstanding credit debt per pool ID
        """
        max_payment = 0.0
        for item in source_allocation.items:
            available = available_balances.get(item.pool_id, 0.0)
            debt = credit_debt.get(item.pool_id, 0.0)
            max_payment += max(0.0, min(available, debt))
        return max_payment

    def calculate_maximum_payable_amount(
        self,
        source_balances: Mapping[str, float],
        destination_debts: Mapping[str, float],
    ) -> MaximumPayable:
        """
        Per-pool payable amounts for every pool holding both money and debt.

        Pools with no matching debt are left out of the breakdown.
        """
        breakdown = [
            PayableAmount(pool_id=pool_id, payable_amount=min(available, destination_debts[pool_id]))
            for pool_id, available in source_balances.items()
            if pool_id in destination_debts
        ]
        return MaximumPayable(
            max_amount=sum(entry.payable_amount for entry in breakdown),
            breakdown=breakdown,
        )

    def validate_allocation_against_balances(
        self,
        allocation: AllocationBreakdown,
        available_balances: Mapping[str, float],
    ) -> list[BalanceShortfall]:
        """
        Items whose absolute amount exceeds what their pool holds.

        A pool with no entry in ``available_balances`` holds nothing.
        """
        shortfalls = []
        for item in allocation.items:
            requested = abs(item.amount)
            available = available_balances.get(item.pool_id)
            if available is None or requested > available:
                shortfalls.append(BalanceShortfall(
                    pool_id=item.pool_id,
                    requested=requested,
                    available=available or 0.0,
                ))
        return shortfalls
