"""
Audit Logger

Every validation outcome routed through the ValidationService can be
logged. This provides:
1. Traceability of accepted and refused writes
2. Debugging capability for forms that keep failing
3. A record of what a bulk import dropped

The audit logger:
- Is synchronous; the validators never suspend
- Only logs locally through structlog; persistence belongs to the CRUD layer
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from budget_integrity.config import LoggingSettings, get_settings
from budget_integrity.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from budget_integrity.models.validation import ImportValidationResult, ValidationResult


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure structlog for local logging.

    Called once at import with the environment's settings; call again with
    explicit settings to switch level or renderer.
    """
    settings = settings or get_settings().logging

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.getLogger("budget_integrity").setLevel(settings.level)


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Writes each AuditEvent to the structured log at the level matching
    its severity.
    """

    def __init__(self, logger_name: str = "budget_integrity.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_validation(
        self,
        operation: str,
        result: ValidationResult,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log the outcome of one validation call."""
        if result.is_valid:
            event = AuditEventBuilder.validation_passed(
                operation=operation,
                entity_id=entity_id,
                warning_codes=[w.code.value for w in result.warnings],
                correlation_id=correlation_id,
            )
        else:
            event = AuditEventBuilder.validation_failed(
                operation=operation,
                error_codes=[code.value for code in result.codes()],
                entity_id=entity_id,
                correlation_id=correlation_id,
            )
        self.log(event)

    def log_import(
        self,
        result: ImportValidationResult,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an import reconciliation summary."""
        error_codes = sorted({
            error.code.value
            for row in result.invalid
            for error in row.errors
        })
        event = AuditEventBuilder.import_reconciled(
            valid_count=len(result.valid),
            invalid_count=len(result.invalid),
            error_codes=error_codes,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_credit_payment(
        self,
        max_payment: float,
        pool_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a maximum credit payment calculation."""
        event = AuditEventBuilder.credit_payment_calculated(
            max_payment=max_payment,
            pool_count=pool_count,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g. one form submit or one
    import) and pass it to every validation made for it.
    """
    return uuid4()
