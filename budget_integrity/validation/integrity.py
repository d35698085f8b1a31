"""
Referential Integrity

Every pool and channel a transaction or strategy points at must exist and
be active. Two entry points do the same membership checks:

- validate_budget_integrity: the whole budget at once, reporting
  DATA_INTEGRITY_ORPHANED_REFERENCE
- validate_transaction_integrity: one transaction against caller-supplied
  id sets, reporting TRANSACTION_CHANNEL_NOT_FOUND / TRANSACTION_POOL_NOT_FOUND

Both codes are part of the contract, so both entry points are kept.

Entities may be model instances or stored camelCase documents; fields are
read leniently, and a reference that cannot be read (missing, or not a
usable ID) counts as pointing at nothing. A missing ``isActive`` means
active, as it does on the models.

All membership tests are set lookups: a budget with thousands of
transactions is checked in one linear pass.
"""

from collections.abc import Iterable, Iterator, Set
from typing import Any, Union

from budget_integrity.models.allocation import AllocationStrategy
from budget_integrity.models.base import is_hashable, read_field, read_items
from budget_integrity.models.budget import Channel, Pool
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

AnyTransaction = Union[IncomeTransaction, ExpenseTransaction, TransferTransaction]


def _is_transfer(transaction: Any) -> bool:
    return isinstance(transaction, TransferTransaction) or read_field(transaction, "type") == "transfer"


def _is_active(entity: Any) -> bool:
    return read_field(entity, "is_active") is not False


def _active_ids(entities: Iterable[Any]) -> set[Any]:
    ids = (read_field(entity, "id") for entity in entities if _is_active(entity))
    return {entity_id for entity_id in ids if is_hashable(entity_id)}


def _is_known(entity_id: Any, known_ids: Set[Any]) -> bool:
    return is_hashable(entity_id) and entity_id in known_ids


def _channel_refs(transaction: Any) -> Iterator[tuple[str, Any]]:
    """Yield (role, channel_id) for every channel a transaction references."""
    if _is_transfer(transaction):
        yield "source", read_field(transaction, "source_channel_id")
        yield "destination", read_field(transaction, "destination_channel_id")
    else:
        yield "", read_field(transaction, "channel_id")


def _pool_refs(transaction: Any) -> Iterator[tuple[str, Any]]:
    """Yield (role, pool_id) for every pool a transaction's allocations reference."""
    if _is_transfer(transaction):
        allocations = (
            ("source", read_field(transaction, "source_allocation")),
            ("destination", read_field(transaction, "destination_allocation")),
        )
    else:
        allocations = (("", read_field(transaction, "allocation_breakdown")),)

    for role, allocation in allocations:
        for item in read_items(allocation):
            yield role, read_field(item, "pool_id")


def _describe(role: str, kind: str) -> str:
    return f"{role} {kind}" if role else kind


class IntegrityChecker:
    """Cross-entity referential integrity for a budget."""

    def validate_budget_integrity(
        self,
        pools: Iterable[Union[Pool, Any]],
        channels: Iterable[Union[Channel, Any]],
        transactions: Iterable[Union[AnyTransaction, Any]],
        allocation_strategies: Iterable[Union[AllocationStrategy, Any]],
    ) -> ValidationResult:
        """
        Find references to pools and channels that are missing or inactive.

        Inactive strategies are not checked; they no longer route money.
        """
        pool_ids = _active_ids(pools)
        channel_ids = _active_ids(channels)

        errors: list[ValidationIssue] = []

        for transaction in transactions:
            transaction_id = read_field(transaction, "id")
            noun = "Transfer" if _is_transfer(transaction) else "Transaction"

            for role, channel_id in _channel_refs(transaction):
                if not _is_known(channel_id, channel_ids):
                    errors.append(ValidationIssue(
                        code=ValidationErrorCode.DATA_INTEGRITY_ORPHANED_REFERENCE,
                        message=(
                            f"{noun} {transaction_id} references non-existent "
                            f"{_describe(role, 'channel')} {channel_id}"
                        ),
                        details={"transactionId": transaction_id, "channelId": channel_id},
                    ))

            for role, pool_id in _pool_refs(transaction):
                if not _is_known(pool_id, pool_ids):
                    where = f" {role} allocation" if role else ""
                    errors.append(ValidationIssue(
                        code=ValidationErrorCode.DATA_INTEGRITY_ORPHANED_REFERENCE,
                        message=(
                            f"{noun} {transaction_id}{where} references non-existent pool {pool_id}"
                        ),
                        details={"transactionId": transaction_id, "poolId": pool_id},
                    ))

        for strategy in allocation_strategies:
            if not _is_active(strategy):
                continue
            strategy_id = read_field(strategy, "id")
            allocations = read_field(strategy, "allocations")
            if not isinstance(allocations, (list, tuple)):
                continue
            for allocation in allocations:
                pool_id = read_field(allocation, "pool_id")
                if not _is_known(pool_id, pool_ids):
                    errors.append(ValidationIssue(
                        code=ValidationErrorCode.DATA_INTEGRITY_ORPHANED_REFERENCE,
                        message=(
                            f"Allocation strategy {strategy_id} references "
                            f"non-existent pool {pool_id}"
                        ),
                        details={"strategyId": strategy_id, "poolId": pool_id},
                    ))

        return ValidationResult.from_issues(errors)

    def validate_transaction_integrity(
        self,
        transaction: Union[AnyTransaction, Any],
        existing_pool_ids: Set[str],
        existing_channel_ids: Set[str],
    ) -> ValidationResult:
        """Check one transaction's references against known pool and channel IDs."""
        errors: list[ValidationIssue] = []

        for role, channel_id in _channel_refs(transaction):
            if not _is_known(channel_id, existing_channel_ids):
                label = _describe(role.capitalize(), "channel") if role else "Referenced channel"
                errors.append(ValidationIssue(
                    code=ValidationErrorCode.TRANSACTION_CHANNEL_NOT_FOUND,
                    message=f"{label} {channel_id} does not exist",
                    details={"channelId": channel_id},
                ))

        for role, pool_id in _pool_refs(transaction):
            if not _is_known(pool_id, existing_pool_ids):
                message = (
                    f"{role.capitalize()} allocation references non-existent pool {pool_id}"
                    if role
                    else f"Referenced pool {pool_id} does not exist"
                )
                errors.append(ValidationIssue(
                    code=ValidationErrorCode.TRANSACTION_POOL_NOT_FOUND,
                    message=message,
                    details={"poolId": pool_id},
                ))

        return ValidationResult.from_issues(errors)
