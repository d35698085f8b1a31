"""
Transaction Models

Three kinds of money movement, modelled as a discriminated union on ``type``:

- INCOME: money entering a channel, split across pools
- EXPENSE: money leaving a channel, taken from pools
- TRANSFER: money moving between channels and/or pools

DESIGN DECISION: Each variant is its own model with only the fields it
needs. A validator for one variant never has to ask whether a field from
another variant happens to be present.

Positive amounts are enforced here. Date-not-in-future and allocation
reconciliation are business rules and belong to the TransactionValidator.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import Field, TypeAdapter

from budget_integrity.models.allocation import AllocationBreakdown
from budget_integrity.models.base import BudgetDocument


TRANSACTION_TYPES = ("income", "expense", "transfer")


class BaseTransaction(BudgetDocument):
    """Fields shared by every transaction type."""

    id: str = Field(..., min_length=1)
    budget_id: str = Field(..., min_length=1)
    date: datetime
    notes: Optional[str] = Field(default=None, max_length=500)
    amount: float = Field(..., gt=0)


class IncomeTransaction(BaseTransaction):
    """Money coming in. Defaults its breakdown from the active strategy."""

    type: Literal["income"] = "income"
    channel_id: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1, max_length=100)
    allocation_breakdown: AllocationBreakdown


class ExpenseTransaction(BaseTransaction):
    """Money going out. Defaults to a single pool, can be split."""

    type: Literal["expense"] = "expense"
    channel_id: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    allocation_breakdown: AllocationBreakdown


class TransferTransaction(BaseTransaction):
    """
    Money moving between channels, pools, or both.

    A credit card payment is a transfer whose destination is a credit channel.
    """

    type: Literal["transfer"] = "transfer"
    source_channel_id: str = Field(..., min_length=1)
    source_allocation: AllocationBreakdown
    destination_channel_id: str = Field(..., min_length=1)
    destination_allocation: AllocationBreakdown


Transaction = Annotated[
    Union[IncomeTransaction, ExpenseTransaction, TransferTransaction],
    Field(discriminator="type"),
]

_transaction_adapter: TypeAdapter[Transaction] = TypeAdapter(Transaction)


def parse_transaction(data: object) -> Union[IncomeTransaction, ExpenseTransaction, TransferTransaction]:
    """
    Parse a raw document into the matching transaction model.

    Raises:
        pydantic.ValidationError: If the document has the wrong shape
    """
    return _transaction_adapter.validate_python(data)
