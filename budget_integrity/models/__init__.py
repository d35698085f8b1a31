"""
Data Models Package

This package contains all Pydantic models used by the integrity engine.
They double as the shape/schema layer: the validators re-run these schemas
and report a failure as a single SCHEMA_VALIDATION_FAILED issue.
"""

from budget_integrity.models.allocation import (
    AllocationBreakdown,
    AllocationStrategy,
    PoolAllocation,
    PoolAllocationItem,
    create_allocation_breakdown,
    create_allocation_from_strategy,
    create_proportional_allocation,
    create_single_pool_allocation,
    normalize_allocation_breakdown,
)
from budget_integrity.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from budget_integrity.models.balance import (
    BalanceSnapshot,
    CurrentBalance,
    PoolBalance,
    SnapshotReason,
    calculate_net_worth,
    create_balance_snapshot,
    get_channel_balances,
    get_channel_total_balance,
    get_pool_balances,
    get_pool_channel_balance,
    get_pool_total_balance,
)
from budget_integrity.models.budget import (
    Channel,
    ChannelType,
    Pool,
    PoolPurposeType,
)
from budget_integrity.models.transaction import (
    TRANSACTION_TYPES,
    ExpenseTransaction,
    IncomeTransaction,
    Transaction,
    TransferTransaction,
    parse_transaction,
)
from budget_integrity.models.validation import (
    ImportValidationResult,
    InvalidImportRow,
    ValidationErrorCode,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Budget entities
    "Channel",
    "ChannelType",
    "Pool",
    "PoolPurposeType",
    # Allocations
    "AllocationBreakdown",
    "AllocationStrategy",
    "PoolAllocation",
    "PoolAllocationItem",
    "create_allocation_breakdown",
    "create_allocation_from_strategy",
    "create_proportional_allocation",
    "create_single_pool_allocation",
    "normalize_allocation_breakdown",
    # Transactions
    "TRANSACTION_TYPES",
    "ExpenseTransaction",
    "IncomeTransaction",
    "Transaction",
    "TransferTransaction",
    "parse_transaction",
    # Balances
    "BalanceSnapshot",
    "CurrentBalance",
    "PoolBalance",
    "SnapshotReason",
    "calculate_net_worth",
    "create_balance_snapshot",
    "get_channel_balances",
    "get_channel_total_balance",
    "get_pool_balances",
    "get_pool_channel_balance",
    "get_pool_total_balance",
    # Validation results
    "ImportValidationResult",
    "InvalidImportRow",
    "ValidationErrorCode",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
