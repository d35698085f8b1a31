"""
Balance Models

Balances are SUPPLIED to the engine, never derived from transaction history.

- PoolBalance: the amount of one pool held in one channel (signed; credit
  channels legitimately go negative)
- CurrentBalance: the live state of every pool/channel pair in a budget
- BalanceSnapshot: the same state frozen at a point in time

The aggregation helpers below are simple folds over a balance list.
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import Field

from budget_integrity.models.base import BudgetDocument


class SnapshotReason(str, Enum):
    """Why a snapshot was taken."""
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    MANUAL_SNAPSHOT = "manual_snapshot"
    END_OF_PERIOD = "end_of_period"


class PoolBalance(BudgetDocument):
    """Amount of one pool held in one channel."""

    pool_id: str = Field(..., min_length=1)
    channel_id: str = Field(..., min_length=1)
    amount: float  # Can be negative for credit accounts


class CurrentBalance(BudgetDocument):
    """Current balance of every pool/channel combination in a budget."""

    id: str = Field(..., min_length=1)
    budget_id: str = Field(..., min_length=1)
    balances: list[PoolBalance] = Field(default_factory=list)
    last_updated: datetime
    updated_by: str = Field(..., min_length=1, description="User ID, for the audit trail")


class BalanceSnapshot(BudgetDocument):
    """Complete balance state captured at a specific point in time."""

    id: str = Field(..., min_length=1)
    budget_id: str = Field(..., min_length=1)
    snapshot_date: datetime
    balances: list[PoolBalance] = Field(default_factory=list)
    created_at: datetime
    reason: SnapshotReason
    related_transaction_id: Optional[str] = None


# =============================================================================
# AGGREGATION HELPERS
# =============================================================================

def get_pool_channel_balance(balances: Iterable[PoolBalance], pool_id: str, channel_id: str) -> float:
    """Balance of one pool in one channel, 0 when there is no entry."""
    for balance in balances:
        if balance.pool_id == pool_id and balance.channel_id == channel_id:
            return balance.amount
    return 0.0


def get_channel_balances(balances: Iterable[PoolBalance], channel_id: str) -> list[PoolBalance]:
    return [b for b in balances if b.channel_id == channel_id]


def get_pool_balances(balances: Iterable[PoolBalance], pool_id: str) -> list[PoolBalance]:
    return [b for b in balances if b.pool_id == pool_id]


def get_channel_total_balance(balances: Iterable[PoolBalance], channel_id: str) -> float:
    """Sum of all pools within a channel."""
    return sum(b.amount for b in balances if b.channel_id == channel_id)


def get_pool_total_balance(balances: Iterable[PoolBalance], pool_id: str) -> float:
    """Sum of one pool across all channels."""
    return sum(b.amount for b in balances if b.pool_id == pool_id)


def calculate_net_worth(balances: Iterable[PoolBalance]) -> float:
    """Assets minus debts: negative credit balances subtract naturally."""
    return sum(b.amount for b in balances)


def create_balance_snapshot(
    snapshot_id: str,
    budget_id: str,
    balances: Iterable[PoolBalance],
    reason: SnapshotReason,
    related_transaction_id: Optional[str] = None,
) -> BalanceSnapshot:
    """
    Capture the given balances as a snapshot taken now.

    The balance list is copied; later changes to the source list do not
    leak into the snapshot.
    """
    now = datetime.now(timezone.utc)
    return BalanceSnapshot(
        id=snapshot_id,
        budget_id=budget_id,
        snapshot_date=now,
        balances=list(balances),
        created_at=now,
        reason=reason,
        related_transaction_id=related_transaction_id,
    )
