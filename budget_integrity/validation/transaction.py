"""
Transaction Validation

Each transaction type goes through the same pipeline:

STAGE 1 - SCHEMA: the variant's pydantic model. For transactions a schema
failure is REPORTED but does not stop the pipeline, so the user sees the
base-field problems in the same round trip.

STAGE 2 - BASE FIELDS: notes present, amount positive, date not in future.

STAGE 3 - RECONCILIATION: every allocation must total the transaction
amount (within the allocation tolerance), and each nested breakdown goes
through the AllocationValidator.

Every applicable error is accumulated; nothing stops at the first one.
"""

from datetime import date
from typing import Any, Optional, Union

from budget_integrity.config import ValidationSettings
from budget_integrity.models.base import (
    is_hashable,
    is_in_future,
    is_number,
    read_field,
    read_items,
)
from budget_integrity.models.transaction import (
    ExpenseTransaction,
    IncomeTransaction,
    TransferTransaction,
)
from budget_integrity.models.validation import (
    ValidationErrorCode,
    ValidationIssue,
    ValidationResult,
)
from budget_integrity.validation.allocation import AllocationValidator
from budget_integrity.validation.schema import check_schema


class TransactionValidator:
    """
    Validates income, expense and transfer transactions.

    Nested allocation breakdowns are delegated to an AllocationValidator
    sharing the same settings.
    """

    def __init__(
        self,
        settings: Optional[ValidationSettings] = None,
        allocation_validator: Optional[AllocationValidator] = None,
    ):
        self._allocations = allocation_validator or AllocationValidator(settings)
        self._settings = settings or self._allocations.settings

    @property
    def settings(self) -> ValidationSettings:
        return self._settings

    def validate_transaction(self, transaction: Any) -> ValidationResult:
        """
        Base checks shared by every transaction type.

        Reads fields leniently: the transaction may be partially built or
        may already have failed its schema.
        """
        errors: list[ValidationIssue] = []

        notes = read_field(transaction, "notes")
        if not isinstance(notes, str) or not notes.strip():
            errors.append(ValidationIssue(
                field="notes",
                code=ValidationErrorCode.TRANSACTION_DESCRIPTION_EMPTY,
                message="Transaction notes are required",
            ))

        amount = read_field(transaction, "amount")
        if not is_number(amount) or not amount > 0:
            errors.append(ValidationIssue(
                field="amount",
                code=ValidationErrorCode.TRANSACTION_AMOUNT_INVALID,
                message="Transaction amount must be positive",
                details={"amount": amount},
            ))

        when = read_field(transaction, "date")
        if not when:
            errors.append(ValidationIssue(
                field="date",
                code=ValidationErrorCode.TRANSACTION_DATE_INVALID,
                message="Transaction date is required",
            ))
        elif not isinstance(when, date):
            errors.append(ValidationIssue(
                field="date",
                code=ValidationErrorCode.TRANSACTION_DATE_INVALID,
                message=f"Transaction date is not a date: {when!r}",
            ))
        elif is_in_future(when):
            errors.append(ValidationIssue(
                field="date",
                code=ValidationErrorCode.TRANSACTION_DATE_INVALID,
                message="Transaction date cannot be in the future",
                details={"date": when.isoformat()},
            ))

        return ValidationResult.from_issues(errors)

    def validate_income_transaction(self, income: Any) -> ValidationResult:
        """Validate an income transaction and its allocation breakdown."""
        return self._validate_with_breakdown(income, IncomeTransaction, "Income")

    def validate_expense_transaction(self, expense: Any) -> ValidationResult:
        """Validate an expense transaction and its allocation breakdown."""
        return self._validate_with_breakdown(expense, ExpenseTransaction, "Expense")

    def validate_transfer_transaction(self, transfer: Any) -> ValidationResult:
        """
        Validate a transfer.

        Moving money within one channel is allowed as long as it moves
        between different pools. Same channel AND the same set of pools on
        both sides means nothing actually moves.
        """
        errors: list[ValidationIssue] = []

        parsed, schema_issue = check_schema(
            TransferTransaction,
            transfer,
            "Transfer transaction schema validation failed",
        )
        if schema_issue:
            errors.append(schema_issue)
        subject = parsed or transfer

        errors.extend(self.validate_transaction(subject).errors)

        source = read_field(subject, "source_allocation")
        destination = read_field(subject, "destination_allocation")

        if read_field(subject, "source_channel_id") == read_field(subject, "destination_channel_id"):
            if _pool_ids(source) == _pool_ids(destination):
                errors.append(ValidationIssue(
                    field="channels",
                    code=ValidationErrorCode.DATA_INTEGRITY_INVALID_STATE,
                    message="Cannot transfer between the same channel and pool combinations",
                ))

        amount = read_field(subject, "amount")
        for field, label, allocation in (
            ("sourceAllocation", "Source", source),
            ("destinationAllocation", "Destination", destination),
        ):
            if allocation:
                errors.extend(self._reconcile(allocation, amount, field, label))

        return ValidationResult.from_issues(errors)

    def validate(
        self,
        transaction: Union[IncomeTransaction, ExpenseTransaction, TransferTransaction],
    ) -> ValidationResult:
        """Dispatch to the validator for the transaction's own type."""
        if isinstance(transaction, IncomeTransaction):
            return self.validate_income_transaction(transaction)
        if isinstance(transaction, ExpenseTransaction):
            return self.validate_expense_transaction(transaction)
        if isinstance(transaction, TransferTransaction):
            return self.validate_transfer_transaction(transaction)
        raise TypeError(f"Not a transaction: {type(transaction).__name__}")

    def _validate_with_breakdown(
        self,
        transaction: Any,
        model: type[Union[IncomeTransaction, ExpenseTransaction]],
        label: str,
    ) -> ValidationResult:
        errors: list[ValidationIssue] = []

        parsed, schema_issue = check_schema(
            model,
            transaction,
            f"{label} transaction schema validation failed",
        )
        if schema_issue:
            errors.append(schema_issue)
        subject = parsed or transaction

        errors.extend(self.validate_transaction(subject).errors)

        breakdown = read_field(subject, "allocation_breakdown")
        if breakdown:
            errors.extend(self._reconcile(
                breakdown,
                read_field(subject, "amount"),
                "allocationBreakdown",
                "Allocation breakdown",
            ))

        return ValidationResult.from_issues(errors)

    def _reconcile(
        self,
        allocation: Any,
        amount: Any,
        field: str,
        label: str,
    ) -> list[ValidationIssue]:
        """Allocation total vs transaction amount, then the allocation's own checks."""
        errors: list[ValidationIssue] = []

        total = read_field(allocation, "total_amount")
        if is_number(total) and is_number(amount):
            if abs(total - amount) > self._settings.allocation_tolerance:
                errors.append(ValidationIssue(
                    field=field,
                    code=ValidationErrorCode.TRANSACTION_ALLOCATION_MISMATCH,
                    message=f"{label} total ({total}) must equal transaction amount ({amount})",
                    details={"allocationTotal": total, "transactionAmount": amount},
                ))

        errors.extend(self._allocations.validate_allocation_breakdown(allocation).errors)
        return errors


def _pool_ids(allocation: Any) -> set[Any]:
    """Pool IDs of an allocation that may not have passed its schema."""
    pool_ids = (read_field(item, "pool_id") for item in read_items(allocation))
    return {pool_id for pool_id in pool_ids if is_hashable(pool_id)}
