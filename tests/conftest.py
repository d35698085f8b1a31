"""
Shared fixtures and factories.

Factories return valid documents by default; tests override only the
fields they are about.
"""

from datetime import datetime, timedelta

import pytest

from budget_integrity.config import ValidationSettings
from budget_integrity.models import (
    AllocationBreakdown,
    AllocationStrategy,
    Channel,
    ChannelType,
    ExpenseTransaction,
    IncomeTransaction,
    Pool,
    PoolAllocation,
    PoolAllocationItem,
    PoolBalance,
    PoolPurposeType,
    TransferTransaction,
)

BUDGET_ID = "budget1"


def yesterday() -> datetime:
    return datetime.now() - timedelta(days=1)


def breakdown(*items: tuple[str, float], total: float | None = None) -> AllocationBreakdown:
    """Breakdown from (pool_id, amount) pairs; total defaults to their sum."""
    return AllocationBreakdown(
        items=[PoolAllocationItem(pool_id=pool_id, amount=amount) for pool_id, amount in items],
        total_amount=sum(amount for _, amount in items) if total is None else total,
    )


def make_pool(pool_id: str = "pool1", **overrides) -> Pool:
    fields = dict(
        id=pool_id,
        budget_id=BUDGET_ID,
        name=pool_id.title(),
        purpose_type=PoolPurposeType.SPENDING,
    )
    fields.update(overrides)
    return Pool(**fields)


def make_channel(channel_id: str = "checking", **overrides) -> Channel:
    fields = dict(
        id=channel_id,
        budget_id=BUDGET_ID,
        name=channel_id.title(),
        type=ChannelType.CHECKING,
    )
    fields.update(overrides)
    return Channel(**fields)


def make_income(**overrides) -> IncomeTransaction:
    fields = dict(
        id="tx-income",
        budget_id=BUDGET_ID,
        date=yesterday(),
        notes="Paycheck",
        amount=150.0,
        channel_id="checking",
        source="Employer",
        allocation_breakdown=breakdown(("pool1", 100.0), ("pool2", 50.0)),
    )
    fields.update(overrides)
    return IncomeTransaction(**fields)


def make_expense(**overrides) -> ExpenseTransaction:
    fields = dict(
        id="tx-expense",
        budget_id=BUDGET_ID,
        date=yesterday(),
        notes="Groceries",
        amount=40.0,
        channel_id="checking",
        category="Food",
        allocation_breakdown=breakdown(("pool1", 40.0)),
    )
    fields.update(overrides)
    return ExpenseTransaction(**fields)


def make_transfer(**overrides) -> TransferTransaction:
    fields = dict(
        id="tx-transfer",
        budget_id=BUDGET_ID,
        date=yesterday(),
        notes="Card payment",
        amount=100.0,
        source_channel_id="checking",
        source_allocation=breakdown(("pool1", 100.0)),
        destination_channel_id="credit",
        destination_allocation=breakdown(("pool1", 100.0)),
    )
    fields.update(overrides)
    return TransferTransaction(**fields)


def make_strategy(*allocations: tuple[str, float], **overrides) -> AllocationStrategy:
    fields = dict(
        id="strategy1",
        budget_id=BUDGET_ID,
        name="Default split",
        allocations=[
            PoolAllocation(pool_id=pool_id, proportion=proportion)
            for pool_id, proportion in (allocations or (("pool1", 0.6), ("pool2", 0.4)))
        ],
    )
    fields.update(overrides)
    return AllocationStrategy(**fields)


def make_balance(pool_id: str = "pool1", channel_id: str = "checking", amount: float = 100.0) -> PoolBalance:
    return PoolBalance(pool_id=pool_id, channel_id=channel_id, amount=amount)


@pytest.fixture
def settings() -> ValidationSettings:
    """Default tolerances, independent of the environment."""
    return ValidationSettings(
        allocation_tolerance=0.01,
        proportion_tolerance=0.0001,
        negative_credit_balance_as_warning=False,
    )


@pytest.fixture
def pools() -> list[Pool]:
    return [make_pool("pool1"), make_pool("pool2", purpose_type=PoolPurposeType.SAVING)]


@pytest.fixture
def channels() -> list[Channel]:
    return [
        make_channel("checking"),
        make_channel("credit", type=ChannelType.CREDIT, institution="Bank", credit_limit=5000),
    ]
