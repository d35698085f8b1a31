"""
Pools and Channels

A budget is split along two independent axes:
- Pools: WHAT the money is for (groceries, emergency fund, vacation)
- Channels: WHERE the money physically sits (cash, checking, credit card)

Every balance is a (pool, channel) pair. Both entities are owned by a budget
and created by the CRUD layer; the integrity engine treats them as read-only.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from budget_integrity.models.base import BudgetDocument


# =============================================================================
# ENUMS
# =============================================================================

class PoolPurposeType(str, Enum):
    """What a pool is for. Determines how the UI treats it."""
    SPENDING = "spending"  # Immediate consumption (groceries, entertainment)
    SAVING = "saving"      # Accumulation without a target (emergency fund)
    GOAL = "goal"          # Specific target amount and/or date


class ChannelType(str, Enum):
    """Kind of financial account backing a channel."""
    CASH = "cash"
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"


# =============================================================================
# ENTITIES
# =============================================================================

class Pool(BudgetDocument):
    """A labeled bucket of money, independent of the account holding it."""

    id: str = Field(..., min_length=1, description="Pool ID")
    budget_id: str = Field(..., min_length=1, description="Owning budget")
    name: str = Field(default="", max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    purpose_type: PoolPurposeType

    # Goal pools only
    target_amount: Optional[float] = Field(default=None, gt=0)
    target_date: Optional[date] = None

    is_active: bool = True


class Channel(BudgetDocument):
    """A physical or financial account holding money for one or more pools."""

    id: str = Field(..., min_length=1, description="Channel ID")
    budget_id: str = Field(..., min_length=1, description="Owning budget")
    name: str = Field(default="", max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    type: ChannelType
    institution: Optional[str] = Field(default=None, max_length=100)
    credit_limit: Optional[float] = Field(default=None, gt=0)
    is_active: bool = True

    @model_validator(mode="after")
    def validate_cash_has_no_institution(self) -> "Channel":
        """Cash is not held at a financial institution."""
        if self.type == ChannelType.CASH and self.institution:
            raise ValueError("Cash channels cannot have an institution")
        return self

    @property
    def is_credit(self) -> bool:
        return self.type == ChannelType.CREDIT
