"""
Tests for Budget Integrity models

Test strategy:
1. Unit tests for the pydantic models (the schema layer)
2. Unit tests for the pure allocation and balance helpers
3. No I/O anywhere: every document is built in memory
"""

import pytest
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import ValidationError

from budget_integrity.exceptions import AllocationError
from budget_integrity.models import (
    AllocationBreakdown,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    ChannelType,
    ExpenseTransaction,
    IncomeTransaction,
    Pool,
    PoolAllocation,
    PoolAllocationItem,
    SnapshotReason,
    TransferTransaction,
    ValidationErrorCode,
    ValidationIssue,
    ValidationResult,
    calculate_net_worth,
    create_allocation_breakdown,
    create_allocation_from_strategy,
    create_balance_snapshot,
    create_proportional_allocation,
    create_single_pool_allocation,
    get_channel_balances,
    get_channel_total_balance,
    get_pool_balances,
    get_pool_channel_balance,
    get_pool_total_balance,
    normalize_allocation_breakdown,
    parse_transaction,
)
from budget_integrity.models.base import is_in_future, read_field

from conftest import BUDGET_ID, breakdown, make_balance, make_channel, make_income, make_pool


class TestBudgetModels:
    """Tests for pools and channels."""

    def test_pool_creation(self):
        """Test Pool model creation."""
        pool = make_pool("groceries", target_amount=500.0)
        assert pool.id == "groceries"
        assert pool.is_active is True

    def test_pool_accepts_camel_case_keys(self):
        """Test that stored camelCase documents parse."""
        pool = Pool.model_validate({
            "id": "p1",
            "budgetId": BUDGET_ID,
            "purposeType": "goal",
            "targetAmount": 1000,
            "isActive": False,
        })
        assert pool.budget_id == BUDGET_ID
        assert pool.is_active is False

    def test_pool_rejects_non_positive_target(self):
        """Test that a goal target must be positive."""
        with pytest.raises(ValidationError):
            make_pool(target_amount=0)

    def test_channel_strips_whitespace(self):
        """Test that whitespace is stripped from channel names."""
        assert make_channel(name="  Wallet  ").name == "Wallet"

    def test_cash_channel_rejects_institution(self):
        """Test that cash cannot be held at an institution."""
        with pytest.raises(ValidationError, match="Cash channels cannot have an institution"):
            make_channel("wallet", type=ChannelType.CASH, institution="Bank")

    def test_channel_is_credit(self):
        """Test the credit channel flag."""
        assert make_channel(type=ChannelType.CREDIT).is_credit
        assert not make_channel().is_credit

    def test_models_are_immutable(self):
        """Test that documents cannot be changed in place."""
        pool = make_pool()
        with pytest.raises(ValidationError):
            pool.name = "Other"


class TestAllocationModels:
    """Tests for allocation breakdown and strategy models."""

    def test_breakdown_creation(self):
        """Test AllocationBreakdown creation and derived values."""
        alloc = breakdown(("pool1", 100.0), ("pool2", 50.0))
        assert alloc.total_amount == 150.0
        assert alloc.pool_ids == {"pool1", "pool2"}
        assert alloc.calculated_total == 150.0

    def test_breakdown_rejects_sum_mismatch(self):
        """Test that items must add up to the total."""
        with pytest.raises(ValidationError, match="sum to"):
            breakdown(("pool1", 100.0), total=150.0)

    def test_breakdown_accepts_sub_cent_drift(self):
        """Test that rounding drift below one cent is tolerated."""
        assert breakdown(("pool1", 33.333), ("pool2", 66.666), total=100.0)

    def test_breakdown_rejects_duplicate_pools(self):
        """Test that a pool can only appear once."""
        with pytest.raises(ValidationError, match="only appear once"):
            breakdown(("pool1", 50.0), ("pool1", 50.0))

    def test_breakdown_requires_items(self):
        """Test that an empty breakdown is rejected."""
        with pytest.raises(ValidationError):
            AllocationBreakdown(items=[], total_amount=0)

    def test_breakdown_serializes_camel_case(self):
        """Test the wire shape of a breakdown."""
        dumped = breakdown(("pool1", 10.0)).model_dump(by_alias=True)
        assert dumped == {"items": [{"poolId": "pool1", "amount": 10.0}], "totalAmount": 10.0}


class TestTransactionModels:
    """Tests for the transaction variants."""

    def test_income_creation(self):
        """Test IncomeTransaction creation."""
        income = make_income()
        assert income.type == "income"
        assert income.allocation_breakdown.total_amount == income.amount

    def test_amount_must_be_positive(self):
        """Test that non-positive amounts are rejected."""
        with pytest.raises(ValidationError):
            make_income(amount=0)

    def test_notes_length_limit(self):
        """Test the notes length limit."""
        with pytest.raises(ValidationError):
            make_income(notes="x" * 501)

    def test_parse_transaction_dispatches_on_type(self):
        """Test that raw documents parse to the matching variant."""
        raw = make_income().model_dump(by_alias=True)
        assert isinstance(parse_transaction(raw), IncomeTransaction)

        raw = make_income().model_dump(by_alias=True)
        raw.update(type="expense", category="Food")
        assert isinstance(parse_transaction(raw), ExpenseTransaction)

    def test_parse_transaction_rejects_unknown_type(self):
        """Test that an unknown type tag is a schema failure."""
        raw = make_income().model_dump(by_alias=True)
        raw["type"] = "refund"
        with pytest.raises(ValidationError):
            parse_transaction(raw)

    def test_transfer_requires_both_allocations(self):
        """Test that a transfer needs both sides."""
        with pytest.raises(ValidationError):
            TransferTransaction(
                id="t1",
                budget_id=BUDGET_ID,
                date=datetime.now(),
                amount=10.0,
                source_channel_id="checking",
                source_allocation=breakdown(("pool1", 10.0)),
                destination_channel_id="credit",
            )


class TestAllocationHelpers:
    """Tests for the pure breakdown builders."""

    def test_create_allocation_breakdown_sums_items(self):
        """Test that the total is the sum of the items."""
        alloc = create_allocation_breakdown([
            PoolAllocationItem(pool_id="pool1", amount=30.0),
            PoolAllocationItem(pool_id="pool2", amount=20.0),
        ])
        assert alloc.total_amount == 50.0

    def test_create_single_pool_allocation(self):
        """Test the default expense allocation."""
        alloc = create_single_pool_allocation("pool1", 75.0)
        assert [(i.pool_id, i.amount) for i in alloc.items] == [("pool1", 75.0)]
        assert alloc.total_amount == 75.0

    def test_create_allocation_from_strategy(self):
        """Test pre-filling a breakdown from strategy proportions."""
        alloc = create_allocation_from_strategy(
            [PoolAllocation(pool_id="pool1", proportion=0.6),
             PoolAllocation(pool_id="pool2", proportion=0.4)],
            1000.0,
        )
        assert [i.amount for i in alloc.items] == pytest.approx([600.0, 400.0])
        assert alloc.total_amount == 1000.0

    def test_create_proportional_allocation(self):
        """Test distribution by share of target amounts."""
        alloc = create_proportional_allocation({"pool1": 300.0, "pool2": 100.0}, 80.0)
        assert [i.amount for i in alloc.items] == pytest.approx([60.0, 20.0])
        assert alloc.total_amount == 80.0

    def test_create_proportional_allocation_zero_targets(self):
        """Test that zero targets cannot be distributed."""
        with pytest.raises(AllocationError):
            create_proportional_allocation({"pool1": 0.0, "pool2": 0.0}, 80.0)

    def test_normalize_rescales_items(self):
        """Test that items are rescaled to the total."""
        skewed = AllocationBreakdown.model_construct(
            items=[PoolAllocationItem(pool_id="pool1", amount=30.0),
                   PoolAllocationItem(pool_id="pool2", amount=10.0)],
            total_amount=100.0,
        )
        normalized = normalize_allocation_breakdown(skewed)
        assert [i.amount for i in normalized.items] == pytest.approx([75.0, 25.0])
        assert normalized.calculated_total == pytest.approx(100.0)

    def test_normalize_is_idempotent(self):
        """Test that normalizing twice changes nothing."""
        skewed = AllocationBreakdown.model_construct(
            items=[PoolAllocationItem(pool_id="pool1", amount=1.0),
                   PoolAllocationItem(pool_id="pool2", amount=2.0)],
            total_amount=10.0,
        )
        once = normalize_allocation_breakdown(skewed)
        twice = normalize_allocation_breakdown(once)
        assert [i.amount for i in twice.items] == [i.amount for i in once.items]

    def test_normalize_zero_total(self):
        """Test that items summing to zero cannot be rescaled."""
        zero = AllocationBreakdown.model_construct(
            items=[PoolAllocationItem(pool_id="pool1", amount=10.0),
                   PoolAllocationItem(pool_id="pool2", amount=-10.0)],
            total_amount=50.0,
        )
        with pytest.raises(AllocationError):
            normalize_allocation_breakdown(zero)


class TestBalanceHelpers:
    """Tests for balance aggregation helpers."""

    @pytest.fixture
    def balances(self):
        return [
            make_balance("pool1", "checking", 100.0),
            make_balance("pool2", "checking", 50.0),
            make_balance("pool1", "credit", -30.0),
        ]

    def test_pool_channel_balance(self, balances):
        """Test lookup of one pool/channel pair."""
        assert get_pool_channel_balance(balances, "pool1", "credit") == -30.0
        assert get_pool_channel_balance(balances, "pool2", "credit") == 0.0

    def test_channel_and_pool_filters(self, balances):
        """Test filtering by channel and by pool."""
        assert len(get_channel_balances(balances, "checking")) == 2
        assert len(get_pool_balances(balances, "pool1")) == 2

    def test_totals(self, balances):
        """Test channel totals, pool totals and net worth."""
        assert get_channel_total_balance(balances, "checking") == 150.0
        assert get_pool_total_balance(balances, "pool1") == 70.0
        assert calculate_net_worth(balances) == 120.0

    def test_create_balance_snapshot_copies_balances(self, balances):
        """Test that a snapshot does not share the caller's list."""
        snapshot = create_balance_snapshot("snap1", BUDGET_ID, balances, SnapshotReason.MANUAL_SNAPSHOT)
        balances.append(make_balance("pool3", "checking", 1.0))

        assert len(snapshot.balances) == 3
        assert snapshot.snapshot_date == snapshot.created_at
        assert snapshot.snapshot_date.tzinfo is not None


class TestFieldHelpers:
    """Tests for lenient field access and date checks."""

    def test_read_field_from_mapping(self):
        """Test reading snake_case and camelCase keys."""
        assert read_field({"pool_id": "a"}, "pool_id") == "a"
        assert read_field({"poolId": "b"}, "pool_id") == "b"
        assert read_field({}, "pool_id") is None
        assert read_field(None, "pool_id") is None

    def test_read_field_from_model(self):
        """Test reading a model attribute."""
        assert read_field(make_income(), "channel_id") == "checking"

    def test_is_in_future(self):
        """Test naive and aware datetime comparisons."""
        assert is_in_future(datetime(2999, 1, 1))
        assert not is_in_future(datetime(2000, 1, 1, tzinfo=timezone.utc))


class TestValidationResult:
    """Tests for the validation result model."""

    def test_from_issues_with_errors(self):
        """Test that errors make the result invalid."""
        result = ValidationResult.from_issues([
            ValidationIssue(
                field="amount",
                code=ValidationErrorCode.TRANSACTION_AMOUNT_INVALID,
                message="Transaction amount must be positive",
            ),
        ])
        assert result.is_valid is False
        assert result.has_errors
        assert result.error_count == 1
        assert result.codes() == [ValidationErrorCode.TRANSACTION_AMOUNT_INVALID]

    def test_warnings_do_not_invalidate(self):
        """Test that warnings alone keep the result valid."""
        result = ValidationResult.from_issues([], [
            ValidationIssue(code=ValidationErrorCode.BALANCE_NEGATIVE, message="Negative balance"),
        ])
        assert result.is_valid is True
        assert len(result.warnings) == 1

    def test_wire_shape(self):
        """Test serialization with camelCase keys and code strings."""
        result = ValidationResult.from_issues([
            ValidationIssue(code=ValidationErrorCode.ALLOCATION_EMPTY, message="Empty"),
        ])
        dumped = result.model_dump(by_alias=True, mode="json")
        assert dumped["isValid"] is False
        assert dumped["errors"][0]["code"] == "ALLOCATION_EMPTY"
        assert dumped["warnings"] == []


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.VALIDATION_PASSED,
            operation="validate_income_transaction",
            description="validate_income_transaction passed",
        )
        assert event.event_id is not None
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            operation="validate_allocation_strategy",
            entity_id="strategy1",
            correlation_id=correlation_id,
            description="failed",
            error_codes=["ALLOCATION_SUM_INVALID"],
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "validation_failed"
        assert log_dict["entity_id"] == "strategy1"
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_builder_validation_failed(self):
        """Test AuditEventBuilder for failed validations."""
        event = AuditEventBuilder.validation_failed(
            operation="validate_expense_transaction",
            error_codes=["TRANSACTION_AMOUNT_INVALID", "TRANSACTION_DATE_INVALID"],
        )
        assert event.event_type == AuditEventType.VALIDATION_FAILED
        assert event.severity == AuditSeverity.WARNING
        assert "2 errors" in event.description

    def test_builder_validation_passed_with_warnings(self):
        """Test that passing with warnings raises the severity."""
        quiet = AuditEventBuilder.validation_passed("validate_current_balance")
        noisy = AuditEventBuilder.validation_passed(
            "validate_current_balance", warning_codes=["BALANCE_NEGATIVE"],
        )
        assert quiet.severity == AuditSeverity.INFO
        assert noisy.severity == AuditSeverity.WARNING

    def test_builder_import_reconciled(self):
        """Test AuditEventBuilder for imports."""
        event = AuditEventBuilder.import_reconciled(
            valid_count=8, invalid_count=2, error_codes=["IMPORT_INVALID_AMOUNT"],
        )
        assert event.details == {"valid_count": 8, "invalid_count": 2}
        assert event.severity == AuditSeverity.WARNING
