"""
Stage 1: schema validation.

The pydantic models are the shape layer. This module runs a model's schema
over an input and turns pydantic's failure into the engine's single
SCHEMA_VALIDATION_FAILED issue, carrying pydantic's own diagnostics.

Whether a schema failure stops the rest of a validation is decided by the
caller, not here.
"""

from typing import Any, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from budget_integrity.models.validation import ValidationErrorCode, ValidationIssue

ModelT = TypeVar("ModelT", bound=BaseModel)


def check_schema(
    model: type[ModelT],
    data: Any,
    message: str,
) -> tuple[Optional[ModelT], Optional[ValidationIssue]]:
    """
    Validate ``data`` (a model instance or a mapping) against ``model``.

    Returns: (parsed_model, None) on success, (None, issue) on failure
    """
    try:
        return model.model_validate(data), None
    except SchemaError as exc:
        return None, ValidationIssue(
            code=ValidationErrorCode.SCHEMA_VALIDATION_FAILED,
            message=message,
            details={
                "schemaErrors": exc.errors(
                    include_url=False,
                    include_context=False,
                    include_input=False,
                ),
            },
        )
