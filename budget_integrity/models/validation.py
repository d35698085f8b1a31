"""
Validation Result Models

Every validator returns a ValidationResult. Expected failures are NEVER
raised as exceptions; they are collected so the caller can present the
complete list of problems in a single round trip.

Serialized with ``model_dump(by_alias=True)`` the result has the wire shape
``{isValid, errors: [{field, code, message, details}], warnings: [...]}``.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ValidationErrorCode(str, Enum):
    """
    Error codes reported by the integrity engine.

    The string values are part of the output contract consumed by the UI.
    """
    # Delegated shape failures
    SCHEMA_VALIDATION_FAILED = "SCHEMA_VALIDATION_FAILED"

    # Allocation
    ALLOCATION_EMPTY = "ALLOCATION_EMPTY"
    ALLOCATION_NEGATIVE_AMOUNT = "ALLOCATION_NEGATIVE_AMOUNT"
    ALLOCATION_SUM_INVALID = "ALLOCATION_SUM_INVALID"
    ALLOCATION_DUPLICATE_POOL = "ALLOCATION_DUPLICATE_POOL"
    ALLOCATION_EXCEEDS_BALANCE = "ALLOCATION_EXCEEDS_BALANCE"

    # Transaction
    TRANSACTION_AMOUNT_INVALID = "TRANSACTION_AMOUNT_INVALID"
    TRANSACTION_DATE_INVALID = "TRANSACTION_DATE_INVALID"
    TRANSACTION_DESCRIPTION_EMPTY = "TRANSACTION_DESCRIPTION_EMPTY"
    TRANSACTION_ALLOCATION_MISMATCH = "TRANSACTION_ALLOCATION_MISMATCH"
    TRANSACTION_CHANNEL_NOT_FOUND = "TRANSACTION_CHANNEL_NOT_FOUND"
    TRANSACTION_POOL_NOT_FOUND = "TRANSACTION_POOL_NOT_FOUND"

    # Balance
    BALANCE_NEGATIVE = "BALANCE_NEGATIVE"
    BALANCE_INCONSISTENT = "BALANCE_INCONSISTENT"

    # Credit payment
    CREDIT_PAYMENT_INVALID_SOURCE = "CREDIT_PAYMENT_INVALID_SOURCE"

    # Cross-entity integrity
    DATA_INTEGRITY_ORPHANED_REFERENCE = "DATA_INTEGRITY_ORPHANED_REFERENCE"
    DATA_INTEGRITY_INVALID_STATE = "DATA_INTEGRITY_INVALID_STATE"

    # Bulk import
    IMPORT_MISSING_REQUIRED_FIELD = "IMPORT_MISSING_REQUIRED_FIELD"
    IMPORT_INVALID_DATE = "IMPORT_INVALID_DATE"
    IMPORT_INVALID_AMOUNT = "IMPORT_INVALID_AMOUNT"


_RESULT_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidationIssue(BaseModel):
    """
    A single problem found by a validator.

    Used for both errors and warnings; which list it sits in decides
    whether it blocks persistence.
    """
    model_config = _RESULT_CONFIG

    field: Optional[str] = Field(
        default=None,
        description="Path of the offending field, e.g. 'items.pool1.amount'"
    )
    code: ValidationErrorCode
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Machine-readable context (ids, amounts)"
    )


class ValidationResult(BaseModel):
    """Outcome of one validation call."""
    model_config = _RESULT_CONFIG

    is_valid: bool
    errors: list[ValidationIssue] = Field(default_factory=list)

    # Warnings never affect is_valid
    warnings: list[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def from_issues(
        cls,
        errors: Iterable[ValidationIssue],
        warnings: Optional[Iterable[ValidationIssue]] = None,
    ) -> "ValidationResult":
        errors = list(errors)
        return cls(
            is_valid=not errors,
            errors=errors,
            warnings=list(warnings or []),
        )

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def codes(self) -> list[ValidationErrorCode]:
        """Error codes in the order they were reported."""
        return [error.code for error in self.errors]


class InvalidImportRow(BaseModel):
    """An import row that failed, with every reason it failed."""
    model_config = _RESULT_CONFIG

    transaction: dict[str, Any]
    errors: list[ValidationIssue]


class ImportValidationResult(BaseModel):
    """Partition of an import batch into accepted and rejected rows."""
    model_config = _RESULT_CONFIG

    valid: list[dict[str, Any]] = Field(default_factory=list)
    invalid: list[InvalidImportRow] = Field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.valid) + len(self.invalid)
