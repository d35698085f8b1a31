"""
Allocation Validation

Checks the two allocation shapes:
- AllocationBreakdown: items must sum to the total, pools unique (schema),
  then no negative item amounts and a positive total (semantic)
- AllocationStrategy: non-empty, unique pools, proportions in [0, 1] that
  sum to 1.0 within the proportion tolerance

A schema failure short-circuits: the semantic checks would be reading data
of the wrong shape.
"""

from typing import Any, Optional

from budget_integrity.config import ValidationSettings, get_settings
from budget_integrity.models.allocation import AllocationBreakdown, AllocationStrategy
from budget_integrity.models.validation import (
    ValidationErrorCode,
    ValidationIssue,
    ValidationResult,
)
from budget_integrity.validation.schema import check_schema


class AllocationValidator:
    """Validates allocation breakdowns, strategies and single pool draws."""

    def __init__(self, settings: Optional[ValidationSettings] = None):
        self._settings = settings or get_settings().validation

    @property
    def settings(self) -> ValidationSettings:
        return self._settings

    def validate_allocation_breakdown(self, breakdown: Any) -> ValidationResult:
        """
        Validate an allocation breakdown's structure and totals.

        Args:
            breakdown: AllocationBreakdown instance or raw mapping
        """
        parsed, schema_issue = check_schema(
            AllocationBreakdown,
            breakdown,
            "Allocation breakdown schema validation failed",
        )
        if schema_issue:
            return ValidationResult.from_issues([schema_issue])

        errors: list[ValidationIssue] = []

        for item in parsed.items:
            if item.amount < 0:
                errors.append(ValidationIssue(
                    field=f"items.{item.pool_id}.amount",
                    code=ValidationErrorCode.ALLOCATION_NEGATIVE_AMOUNT,
                    message=f"Allocation amount cannot be negative for pool {item.pool_id}",
                    details={"poolId": item.pool_id, "amount": item.amount},
                ))

        if parsed.total_amount <= 0:
            errors.append(ValidationIssue(
                field="totalAmount",
                code=ValidationErrorCode.ALLOCATION_NEGATIVE_AMOUNT,
                message="Total allocation amount must be positive",
                details={"totalAmount": parsed.total_amount},
            ))

        return ValidationResult.from_issues(errors)

    def validate_allocation_strategy(self, strategy: Any) -> ValidationResult:
        """
        Validate that a strategy's proportions describe a complete split.

        Args:
            strategy: AllocationStrategy instance or raw mapping
        """
        parsed, schema_issue = check_schema(
            AllocationStrategy,
            strategy,
            "Allocation strategy schema validation failed",
        )
        if schema_issue:
            return ValidationResult.from_issues([schema_issue])

        if not parsed.allocations:
            return ValidationResult.from_issues([ValidationIssue(
                code=ValidationErrorCode.ALLOCATION_EMPTY,
                message="Allocation strategy must have at least one allocation",
            )])

        errors: list[ValidationIssue] = []

        pool_ids = [allocation.pool_id for allocation in parsed.allocations]
        if len(pool_ids) != len(set(pool_ids)):
            errors.append(ValidationIssue(
                code=ValidationErrorCode.ALLOCATION_DUPLICATE_POOL,
                message="Duplicate pool allocations in strategy",
            ))

        total_proportion = parsed.total_proportion
        if abs(total_proportion - 1.0) > self._settings.proportion_tolerance:
            errors.append(ValidationIssue(
                field="allocations",
                code=ValidationErrorCode.ALLOCATION_SUM_INVALID,
                message=(
                    "Allocation proportions must sum to 100% (1.0), "
                    f"got {total_proportion * 100:.2f}%"
                ),
                details={"totalProportion": total_proportion, "expected": 1.0},
            ))

        for allocation in parsed.allocations:
            field = f"allocations.{allocation.pool_id}.proportion"
            details = {"poolId": allocation.pool_id, "proportion": allocation.proportion}
            if allocation.proportion < 0:
                errors.append(ValidationIssue(
                    field=field,
                    code=ValidationErrorCode.ALLOCATION_NEGATIVE_AMOUNT,
                    message=(
                        f"Allocation proportion cannot be negative for pool {allocation.pool_id}"
                    ),
                    details=details,
                ))
            if allocation.proportion > 1.0:
                errors.append(ValidationIssue(
                    field=field,
                    code=ValidationErrorCode.ALLOCATION_SUM_INVALID,
                    message=f"Allocation proportion cannot exceed 100% for pool {allocation.pool_id}",
                    details=details,
                ))

        return ValidationResult.from_issues(errors)

    def validate_pool_allocation(
        self,
        pool_id: str,
        amount: float,
        available_balance: float,
    ) -> ValidationResult:
        """Validate drawing ``amount`` from a pool holding ``available_balance``."""
        errors: list[ValidationIssue] = []

        if amount < 0:
            errors.append(ValidationIssue(
                field="amount",
                code=ValidationErrorCode.ALLOCATION_NEGATIVE_AMOUNT,
                message="Allocation amount cannot be negative",
                details={"poolId": pool_id, "amount": amount},
            ))

        if amount > available_balance + self._settings.allocation_tolerance:
            errors.append(ValidationIssue(
                field="amount",
                code=ValidationErrorCode.ALLOCATION_EXCEEDS_BALANCE,
                message=(
                    f"Allocation amount ({amount}) exceeds available balance "
                    f"({available_balance}) for pool {pool_id}"
                ),
                details={
                    "poolId": pool_id,
                    "amount": amount,
                    "availableBalance": available_balance,
                },
            ))

        return ValidationResult.from_issues(errors)
