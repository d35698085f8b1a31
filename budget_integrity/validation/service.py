"""
Validation Service

One entry point for every integrity check. The CRUD layer (or a form submit
handler) builds a candidate object, calls the matching method here, and
persists only when the result is valid.

DESIGN DECISION: The service owns no state beyond the frozen settings and
the components built from them. Every method is a synchronous pure
function of its arguments, so one instance can be shared across threads.
When an AuditLogger is attached, each outcome is also written to the
structured log.
"""

from collections.abc import Iterable, Mapping, Set
from typing import Any, Optional
from uuid import UUID

from budget_integrity.audit import AuditLogger
from budget_integrity.config import ValidationSettings, get_settings
from budget_integrity.models.allocation import AllocationBreakdown, AllocationStrategy
from budget_integrity.models.base import read_field
from budget_integrity.models.budget import Channel, Pool
from budget_integrity.models.validation import ImportValidationResult, ValidationResult
from budget_integrity.validation.allocation import AllocationValidator
from budget_integrity.validation.balance import BalanceChecker
from budget_integrity.validation.credit import (
    BalanceShortfall,
    CreditPaymentSolver,
    MaximumPayable,
)
from budget_integrity.validation.imports import ImportReconciler
from budget_integrity.validation.integrity import AnyTransaction, IntegrityChecker
from budget_integrity.validation.transaction import TransactionValidator


class ValidationService:
    """
    Facade over the allocation, transaction, credit, balance, integrity and
    import validators.

    All components share the same ValidationSettings.
    """

    def __init__(
        self,
        settings: Optional[ValidationSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Tolerances and reporting policy. Defaults to the
                      environment-driven settings.
            audit_logger: If given, every outcome is logged.
        """
        self._settings = settings or get_settings().validation
        self._audit = audit_logger

        self._allocations = AllocationValidator(self._settings)
        self._transactions = TransactionValidator(self._settings, self._allocations)
        self._credit = CreditPaymentSolver(self._settings, self._transactions)
        self._balances = BalanceChecker(self._settings)
        self._integrity = IntegrityChecker()
        self._imports = ImportReconciler()

    @property
    def settings(self) -> ValidationSettings:
        return self._settings

    def _report(
        self,
        operation: str,
        result: ValidationResult,
        subject: Any = None,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        if self._audit is not None:
            entity_id = read_field(subject, "id")
            self._audit.log_validation(
                operation,
                result,
                entity_id=entity_id if isinstance(entity_id, str) else None,
                correlation_id=correlation_id,
            )
        return result

    # ==================== Allocations ====================

    def validate_allocation_breakdown(
        self, breakdown: Any, correlation_id: Optional[UUID] = None
    ) -> ValidationResult:
        result = self._allocations.validate_allocation_breakdown(breakdown)
        return self._report("validate_allocation_breakdown", result, breakdown, correlation_id)

    def validate_allocation_strategy(
        self, strategy: Any, correlation_id: Optional[UUID] = None
    ) -> ValidationResult:
        result = self._allocations.validate_allocation_strategy(strategy)
        return self._report("validate_allocation_strategy", result, strategy, correlation_id)

    def validate_pool_allocation(
        self,
        pool_id: str,
        amount: float,
        available_balance: float,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        result = self._allocations.validate_pool_allocation(pool_id, amount, available_balance)
        return self._report("validate_pool_allocation", result, None, correlation_id)

    # ==================== Transactions ====================

    def validate_transaction(
        self, transaction: Any, correlation_id: Optional[UUID] = None
    ) -> ValidationResult:
        result = self._transactions.validate_transaction(transaction)
        return self._report("validate_transaction", result, transaction, correlation_id)

    def validate_income_transaction(
        self, income: Any, correlation_id: Optional[UUID] = None
    ) -> ValidationResult:
        result = self._transactions.validate_income_transaction(income)
        return self._report("validate_income_transaction", result, income, correlation_id)

    def validate_expense_transaction(
        self, expense: Any, correlation_id: Optional[UUID] = None
    ) -> ValidationResult:
        result = self._transactions.validate_expense_transaction(expense)
        return self._report("validate_expense_transaction", result, expense, correlation_id)

    def validate_transfer_transaction(
        self, transfer: Any, correlation_id: Optional[UUID] = None
    ) -> ValidationResult:
        result = self._transactions.validate_transfer_transaction(transfer)
        return self._report("validate_transfer_transaction", result, transfer, correlation_id)

    def validate_any_transaction(
        self, transaction: AnyTransaction, correlation_id: Optional[UUID] = None
    ) -> ValidationResult:
        """Validate a transaction of any type with its own type's rules."""
        result = self._transactions.validate(transaction)
        return self._report(f"validate_{transaction.type}_transaction", result, transaction, correlation_id)

    # ==================== Credit payments ====================

    def validate_credit_payment(
        self, transfer: Any, correlation_id: Optional[UUID] = None
    ) -> ValidationResult:
        result = self._credit.validate_credit_payment(transfer)
        return self._report("validate_credit_payment", result, transfer, correlation_id)

    def calculate_max_credit_payment(
        self,
        source_allocation: AllocationBreakdown,
        available_balances: Mapping[str, float],
        credit_debt: Mapping[str, float],
        correlation_id: Optional[UUID] = None,
    ) -> float:
        max_payment = self._credit.calculate_max_credit_payment(
            source_allocation, available_balances, credit_debt
        )
        if self._audit is not None:
            self._audit.log_credit_payment(
                max_payment, len(source_allocation.items), correlation_id
            )
        return max_payment

    def calculate_maximum_payable_amount(
        self,
        source_balances: Mapping[str, float],
        destination_debts: Mapping[str, float],
    ) -> MaximumPayable:
        return self._credit.calculate_maximum_payable_amount(source_balances, destination_debts)

    def validate_allocation_against_balances(
        self,
        allocation: AllocationBreakdown,
        available_balances: Mapping[str, float],
    ) -> list[BalanceShortfall]:
        return self._credit.validate_allocation_against_balances(allocation, available_balances)

    # ==================== Balances ====================

    def validate_balance_consistency(
        self,
        balances: Iterable[Any],
        channels: Optional[Iterable[Channel]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        result = self._balances.validate_balance_consistency(balances, channels)
        return self._report("validate_balance_consistency", result, None, correlation_id)

    def validate_pool_channel_balance(
        self,
        pool_id: str,
        channel_id: str,
        expected_amount: float,
        actual_amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        result = self._balances.validate_pool_channel_balance(
            pool_id, channel_id, expected_amount, actual_amount
        )
        return self._report("validate_pool_channel_balance", result, None, correlation_id)

    def validate_current_balance(
        self,
        current_balance: Any,
        channels: Optional[Iterable[Channel]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        result = self._balances.validate_current_balance(current_balance, channels)
        return self._report("validate_current_balance", result, current_balance, correlation_id)

    def validate_balance_snapshot(
        self,
        snapshot: Any,
        channels: Optional[Iterable[Channel]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        result = self._balances.validate_balance_snapshot(snapshot, channels)
        return self._report("validate_balance_snapshot", result, snapshot, correlation_id)

    # ==================== Data integrity ====================

    def validate_budget_integrity(
        self,
        pools: Iterable[Pool],
        channels: Iterable[Channel],
        transactions: Iterable[AnyTransaction],
        allocation_strategies: Iterable[AllocationStrategy],
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        result = self._integrity.validate_budget_integrity(
            pools, channels, transactions, allocation_strategies
        )
        return self._report("validate_budget_integrity", result, None, correlation_id)

    def validate_transaction_integrity(
        self,
        transaction: AnyTransaction,
        existing_pool_ids: Set[str],
        existing_channel_ids: Set[str],
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        result = self._integrity.validate_transaction_integrity(
            transaction, existing_pool_ids, existing_channel_ids
        )
        return self._report("validate_transaction_integrity", result, transaction, correlation_id)

    # ==================== Imports ====================

    def validate_import_data(
        self,
        rows: Iterable[Mapping[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> ImportValidationResult:
        result = self._imports.validate_import_data(rows)
        if self._audit is not None:
            self._audit.log_import(result, correlation_id)
        return result
