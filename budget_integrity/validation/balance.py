"""
Balance Consistency Checks

Balances are supplied by the caller, never computed here. The checker only
decides whether a supplied balance state is self-consistent:
- every PoolBalance has a valid shape
- no pool/channel pair is negative
- an expected balance matches the actual one within one cent

Negative balances are legitimate on credit channels. They are still
flagged by default; with ``negative_credit_balance_as_warning`` enabled and
the budget's channels supplied, a negative balance in a credit channel is
reported as a warning instead of an error.
"""

from collections.abc import Iterable
from typing import Any, Optional

from budget_integrity.config import ValidationSettings, get_settings
from budget_integrity.models.balance import BalanceSnapshot, CurrentBalance, PoolBalance
from budget_integrity.models.base import is_in_future, read_field
from budget_integrity.models.budget import Channel, ChannelType
from budget_integrity.models.validation import (
    ValidationErrorCode,
    ValidationIssue,
    ValidationResult,
)
from budget_integrity.validation.schema import check_schema


class BalanceChecker:
    """Validates pool balances, current balance states and snapshots."""

    def __init__(self, settings: Optional[ValidationSettings] = None):
        self._settings = settings or get_settings().validation

    def validate_balance_consistency(
        self,
        balances: Iterable[Any],
        channels: Optional[Iterable[Channel]] = None,
    ) -> ValidationResult:
        """
        Validate a list of pool balances.

        A balance with a bad shape is reported and skipped; the rest of the
        list is still checked.

        Args:
            balances: PoolBalance instances or raw mappings
            channels: Budget channels, used to recognise credit channels
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        credit_channel_ids = set()
        if channels is not None and self._settings.negative_credit_balance_as_warning:
            credit_channel_ids = {c.id for c in channels if c.type == ChannelType.CREDIT}

        for raw in balances:
            balance, schema_issue = check_schema(
                PoolBalance,
                raw,
                (
                    "Pool balance schema validation failed for pool "
                    f"{read_field(raw, 'pool_id')}, channel {read_field(raw, 'channel_id')}"
                ),
            )
            if schema_issue:
                errors.append(schema_issue)
                continue

            if balance.amount < 0:
                issue = ValidationIssue(
                    field="amount",
                    code=ValidationErrorCode.BALANCE_NEGATIVE,
                    message=(
                        f"Negative balance detected for pool {balance.pool_id}, "
                        f"channel {balance.channel_id}"
                    ),
                    details={
                        "poolId": balance.pool_id,
                        "channelId": balance.channel_id,
                        "amount": balance.amount,
                    },
                )
                if balance.channel_id in credit_channel_ids:
                    warnings.append(issue)
                else:
                    errors.append(issue)

        return ValidationResult.from_issues(errors, warnings)

    def validate_pool_channel_balance(
        self,
        pool_id: str,
        channel_id: str,
        expected_amount: float,
        actual_amount: float,
    ) -> ValidationResult:
        """Check an expected pool/channel balance against the actual one."""
        difference = abs(expected_amount - actual_amount)
        if difference <= self._settings.allocation_tolerance:
            return ValidationResult.from_issues([])

        return ValidationResult.from_issues([ValidationIssue(
            code=ValidationErrorCode.BALANCE_INCONSISTENT,
            message=f"Balance inconsistency for pool {pool_id}, channel {channel_id}",
            details={
                "poolId": pool_id,
                "channelId": channel_id,
                "expected": expected_amount,
                "actual": actual_amount,
                "difference": difference,
            },
        )])

    def validate_current_balance(
        self,
        current_balance: Any,
        channels: Optional[Iterable[Channel]] = None,
    ) -> ValidationResult:
        """Validate a budget's current balance state."""
        parsed, schema_issue = check_schema(
            CurrentBalance,
            current_balance,
            "Current balance schema validation failed",
        )
        if schema_issue:
            return ValidationResult.from_issues([schema_issue])

        return self.validate_balance_consistency(parsed.balances, channels)

    def validate_balance_snapshot(
        self,
        snapshot: Any,
        channels: Optional[Iterable[Channel]] = None,
    ) -> ValidationResult:
        """Validate a historic balance snapshot."""
        parsed, schema_issue = check_schema(
            BalanceSnapshot,
            snapshot,
            "Balance snapshot schema validation failed",
        )
        if schema_issue:
            return ValidationResult.from_issues([schema_issue])

        errors: list[ValidationIssue] = []

        # Reuses the transaction date code; there is no snapshot-specific one
        if is_in_future(parsed.snapshot_date):
            errors.append(ValidationIssue(
                field="snapshotDate",
                code=ValidationErrorCode.TRANSACTION_DATE_INVALID,
                message="Snapshot date cannot be in the future",
                details={"snapshotDate": parsed.snapshot_date.isoformat()},
            ))

        balances = self.validate_balance_consistency(parsed.balances, channels)
        errors.extend(balances.errors)

        return ValidationResult.from_issues(errors, balances.warnings)
