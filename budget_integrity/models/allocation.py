"""
Allocation Models

Two related ideas live here:

1. ALLOCATION BREAKDOWN - how ONE transaction's amount is split across pools.
   Example: a $150 paycheck -> $100 groceries, $50 emergency fund.

2. ALLOCATION STRATEGY - a standing RULE for splitting future income.
   Example: 60% spending, 30% saving, 10% vacation.

The breakdown schema carries its own structural refinements (items sum to
the total, no pool twice). The strategy schema only checks field types; the
AllocationValidator reports each strategy rule with its own error code.

The helper functions at the bottom are pure. They build breakdowns without
validating them: run the result through the AllocationValidator.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Optional

from pydantic import Field, model_validator

from budget_integrity.exceptions import AllocationError
from budget_integrity.models.base import BudgetDocument

# Absolute tolerance used by the breakdown schema refinement (one cent)
BREAKDOWN_SUM_TOLERANCE = 0.01


# =============================================================================
# ALLOCATION BREAKDOWN
# =============================================================================

class PoolAllocationItem(BudgetDocument):
    """Amount assigned to one pool. Negative amounts are outflows."""

    pool_id: str = Field(..., min_length=1, description="Pool receiving the amount")
    amount: float


class AllocationBreakdown(BudgetDocument):
    """
    Split of a single dollar amount across one or more pools.

    Constructed per validation call, never persisted by the engine.
    """

    items: list[PoolAllocationItem] = Field(..., min_length=1)
    total_amount: float

    @model_validator(mode="after")
    def validate_items_sum_to_total(self) -> "AllocationBreakdown":
        calculated = sum(item.amount for item in self.items)
        if abs(calculated - self.total_amount) >= BREAKDOWN_SUM_TOLERANCE:
            raise ValueError(
                f"Allocation items sum to {calculated}, "
                f"expected total {self.total_amount}"
            )
        return self

    @model_validator(mode="after")
    def validate_unique_pools(self) -> "AllocationBreakdown":
        pool_ids = [item.pool_id for item in self.items]
        if len(pool_ids) != len(set(pool_ids)):
            raise ValueError("A pool can only appear once in an allocation breakdown")
        return self

    @property
    def pool_ids(self) -> set[str]:
        return {item.pool_id for item in self.items}

    @property
    def calculated_total(self) -> float:
        return sum(item.amount for item in self.items)


# =============================================================================
# ALLOCATION STRATEGY
# =============================================================================

class PoolAllocation(BudgetDocument):
    """One entry of a strategy: a pool and its share of incoming money."""

    pool_id: str = Field(..., min_length=1)
    proportion: float


class AllocationStrategy(BudgetDocument):
    """
    Standing rule for distributing future income across pools.

    Only active strategies are checked for orphaned pool references.
    """

    id: str = Field(default="", description="Strategy ID")
    budget_id: str = Field(default="", description="Owning budget")
    name: Optional[str] = Field(default=None, max_length=100)
    allocations: list[PoolAllocation] = Field(default_factory=list)
    is_active: bool = True

    @property
    def total_proportion(self) -> float:
        return sum(allocation.proportion for allocation in self.allocations)


# =============================================================================
# HELPERS
# =============================================================================

def create_allocation_breakdown(items: Iterable[PoolAllocationItem]) -> AllocationBreakdown:
    """Build a breakdown whose total is the sum of its items."""
    items = list(items)
    return AllocationBreakdown.model_construct(
        items=items,
        total_amount=sum(item.amount for item in items),
    )


def create_single_pool_allocation(pool_id: str, amount: float) -> AllocationBreakdown:
    """Default expense allocation: the whole amount from one pool."""
    return AllocationBreakdown.model_construct(
        items=[PoolAllocationItem(pool_id=pool_id, amount=amount)],
        total_amount=amount,
    )


def create_allocation_from_strategy(
    allocations: Iterable[PoolAllocation],
    total_amount: float,
) -> AllocationBreakdown:
    """
    Pre-fill a breakdown from a strategy.

    Each pool gets ``total_amount * proportion``. If the strategy's
    proportions do not add up to 1.0 the breakdown will not add up either,
    which the AllocationValidator reports.
    """
    items = [
        PoolAllocationItem(
            pool_id=allocation.pool_id,
            amount=total_amount * allocation.proportion,
        )
        for allocation in allocations
    ]
    return AllocationBreakdown.model_construct(items=items, total_amount=total_amount)


def create_proportional_allocation(
    target_amounts: Mapping[str, float],
    actual_amount: float,
) -> AllocationBreakdown:
    """
    Distribute ``actual_amount`` by each pool's share of the summed targets.

    Raises:
        AllocationError: If the targets sum to exactly zero
    """
    total_target = sum(target_amounts.values())
    if total_target == 0:
        raise AllocationError("Cannot create proportional allocation with zero total target")

    items = [
        PoolAllocationItem(pool_id=pool_id, amount=(target / total_target) * actual_amount)
        for pool_id, target in target_amounts.items()
    ]
    return AllocationBreakdown.model_construct(items=items, total_amount=actual_amount)


def normalize_allocation_breakdown(breakdown: AllocationBreakdown) -> AllocationBreakdown:
    """
    Rescale items so they sum to ``total_amount``.

    An already normalized breakdown is returned unchanged.

    Raises:
        AllocationError: If the items sum to exactly zero
    """
    calculated = sum(item.amount for item in breakdown.items)
    if calculated == 0:
        raise AllocationError("Cannot normalize allocation with zero total")

    if math.isclose(calculated, breakdown.total_amount, rel_tol=1e-9, abs_tol=0.0):
        return breakdown

    factor = breakdown.total_amount / calculated
    items = [
        item.model_copy(update={"amount": item.amount * factor})
        for item in breakdown.items
    ]
    return AllocationBreakdown.model_construct(items=items, total_amount=breakdown.total_amount)
