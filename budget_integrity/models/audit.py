"""
Audit Models for Budget Integrity

Every validation outcome can be reported as an audit event. This provides:
1. Traceability of why a write was accepted or refused
2. Debugging information when a form keeps getting rejected
3. A record of bulk imports and what was dropped

DESIGN DECISION: Audit events are append-only value objects. The engine
only emits them to the structured log; persisting them is the CRUD layer's
job.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    VALIDATION_PASSED = "validation_passed"
    VALIDATION_FAILED = "validation_failed"
    IMPORT_RECONCILED = "import_reconciled"
    CREDIT_PAYMENT_CALCULATED = "credit_payment_calculated"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every validation call made through the ValidationService creates one
    when an AuditLogger is attached.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What was validated
    operation: str = Field(
        ...,
        description="Validator operation name, e.g. 'validate_income_transaction'"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the validated document, when it has one"
    )

    # Correlation - for tracking related events (e.g. one form submit)
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    error_codes: list[str] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "operation": self.operation,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "error_codes": self.error_codes,
            "details": self.details,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.validation_failed("validate_pool_allocation", ...)
        event = AuditEventBuilder.import_reconciled(valid_count=10, invalid_count=2)
    """

    @staticmethod
    def validation_passed(
        operation: str,
        entity_id: Optional[str] = None,
        warning_codes: Optional[list[str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        warning_codes = warning_codes or []
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_PASSED,
            severity=AuditSeverity.WARNING if warning_codes else AuditSeverity.INFO,
            operation=operation,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{operation} passed",
            details={"warning_codes": warning_codes} if warning_codes else {},
        )

    @staticmethod
    def validation_failed(
        operation: str,
        error_codes: list[str],
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            operation=operation,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{operation} failed with {len(error_codes)} errors",
            error_codes=error_codes,
        )

    @staticmethod
    def import_reconciled(
        valid_count: int,
        invalid_count: int,
        error_codes: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_RECONCILED,
            severity=AuditSeverity.WARNING if invalid_count else AuditSeverity.INFO,
            operation="validate_import_data",
            correlation_id=correlation_id,
            description=(
                f"Import reconciled: {valid_count} valid, {invalid_count} invalid rows"
            ),
            error_codes=error_codes,
            details={
                "valid_count": valid_count,
                "invalid_count": invalid_count,
            },
        )

    @staticmethod
    def credit_payment_calculated(
        max_payment: float,
        pool_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CREDIT_PAYMENT_CALCULATED,
            severity=AuditSeverity.DEBUG,
            operation="calculate_max_credit_payment",
            correlation_id=correlation_id,
            description=f"Max credit payment {max_payment:.2f} across {pool_count} pools",
            details={
                "max_payment": max_payment,
                "pool_count": pool_count,
            },
        )
