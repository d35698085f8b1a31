"""
Import Reconciliation

Bulk imports (bank CSV exports, spreadsheets) arrive as loose key/value rows
that have not been through any schema yet. Each row is checked on its own
and every check runs, so one pass tells the user everything wrong with the
file:

    date         present and parseable
    description  present and not blank
    amount       present, a real number, not NaN, not zero
    type         one of income | expense | transfer

Amounts may be int, float or Decimal. Integers of any size are accepted,
including ones beyond float range; NaN in either float or Decimal form is
not.

Rows with no errors go to ``valid``; the rest go to ``invalid`` together
with their full error list. Extra keys (category, channelName, ...) are
carried through untouched.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from budget_integrity.models.transaction import TRANSACTION_TYPES
from budget_integrity.models.validation import (
    ImportValidationResult,
    InvalidImportRow,
    ValidationErrorCode,
    ValidationIssue,
)

_datetime_adapter = TypeAdapter(datetime)
_date_adapter = TypeAdapter(date)

# Bank exports commonly use US-style dates alongside ISO 8601
_FALLBACK_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y")


def parse_import_date(value: Any) -> datetime | date | None:
    """
    Parse an import row's date, or return None when it is not a date.

    Accepts date/datetime objects, ISO 8601 dates, datetimes and timestamps
    (through pydantic's parsers), and MM/DD/YYYY strings.
    """
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, bool):
        return None
    for adapter in (_datetime_adapter, _date_adapter):
        try:
            return adapter.validate_python(value)
        except SchemaError:
            continue
    if isinstance(value, str):
        for fmt in _FALLBACK_DATE_FORMATS:
            try:
                return datetime.strptime(value.strip(), fmt)
            except ValueError:
                continue
    return None


def _is_real_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _is_nan(value: int | float | Decimal) -> bool:
    # ints are never NaN and may be too large to convert to float
    if isinstance(value, Decimal):
        return value.is_nan()
    return isinstance(value, float) and math.isnan(value)


class ImportReconciler:
    """Partitions raw import rows into valid and invalid sets."""

    def validate_import_data(self, rows: Iterable[Mapping[str, Any]]) -> ImportValidationResult:
        """Validate every row of an import batch."""
        valid: list[dict[str, Any]] = []
        invalid: list[InvalidImportRow] = []

        for row in rows:
            errors = self.validate_import_row(row)
            if errors:
                invalid.append(InvalidImportRow(transaction=dict(row), errors=errors))
            else:
                valid.append(dict(row))

        return ImportValidationResult(valid=valid, invalid=invalid)

    def validate_import_row(self, row: Mapping[str, Any]) -> list[ValidationIssue]:
        """All problems with a single import row."""
        errors: list[ValidationIssue] = []

        raw_date = row.get("date")
        if not raw_date:
            errors.append(ValidationIssue(
                field="date",
                code=ValidationErrorCode.IMPORT_MISSING_REQUIRED_FIELD,
                message="Date is required",
            ))
        elif parse_import_date(raw_date) is None:
            errors.append(ValidationIssue(
                field="date",
                code=ValidationErrorCode.IMPORT_INVALID_DATE,
                message=f"Invalid date format: {raw_date}",
            ))

        description = row.get("description")
        if not isinstance(description, str) or not description.strip():
            errors.append(ValidationIssue(
                field="description",
                code=ValidationErrorCode.IMPORT_MISSING_REQUIRED_FIELD,
                message="Description is required",
            ))

        amount = row.get("amount")
        if amount is None:
            errors.append(ValidationIssue(
                field="amount",
                code=ValidationErrorCode.IMPORT_MISSING_REQUIRED_FIELD,
                message="Amount is required",
            ))
        elif not _is_real_number(amount) or _is_nan(amount):
            errors.append(ValidationIssue(
                field="amount",
                code=ValidationErrorCode.IMPORT_INVALID_AMOUNT,
                message=f"Invalid amount: {amount}",
            ))
        elif amount == 0:
            errors.append(ValidationIssue(
                field="amount",
                code=ValidationErrorCode.IMPORT_INVALID_AMOUNT,
                message="Amount cannot be zero",
            ))

        if row.get("type") not in TRANSACTION_TYPES:
            errors.append(ValidationIssue(
                field="type",
                code=ValidationErrorCode.IMPORT_MISSING_REQUIRED_FIELD,
                message="Type must be one of: income, expense, transfer",
            ))

        return errors
