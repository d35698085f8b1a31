"""Tests for credit card payment validation and payable amounts."""

import pytest

from budget_integrity.models import ValidationErrorCode
from budget_integrity.validation import CreditPaymentSolver

from conftest import breakdown, make_transfer


@pytest.fixture
def solver(settings):
    return CreditPaymentSolver(settings)


class TestValidateCreditPayment:
    """Tests for validate_credit_payment."""

    def test_valid_payment(self, solver):
        """Test a payment drawn from one pool."""
        assert solver.validate_credit_payment(make_transfer()).is_valid

    def test_transfer_rules_apply(self, solver):
        """Test that a payment is validated as a transfer."""
        result = solver.validate_credit_payment(make_transfer(source_allocation=breakdown(("pool1", 60.0))))
        assert result.codes() == [ValidationErrorCode.TRANSACTION_ALLOCATION_MISMATCH]

    def test_missing_source_pools(self, solver):
        """Test that the paying pools must be named."""
        payment = make_transfer().model_dump(by_alias=True)
        payment["sourceAllocation"] = {"items": [], "totalAmount": 100.0}

        codes = solver.validate_credit_payment(payment).codes()
        assert ValidationErrorCode.CREDIT_PAYMENT_INVALID_SOURCE in codes
        assert ValidationErrorCode.SCHEMA_VALIDATION_FAILED in codes

    def test_malformed_source_items(self, solver):
        """Test that source items which are not a list count as missing."""
        payment = make_transfer(destination_channel_id="checking").model_dump(by_alias=True)
        payment["sourceAllocation"] = {"items": 5, "totalAmount": 100.0}

        codes = solver.validate_credit_payment(payment).codes()
        assert ValidationErrorCode.CREDIT_PAYMENT_INVALID_SOURCE in codes
        assert ValidationErrorCode.SCHEMA_VALIDATION_FAILED in codes


class TestMaxCreditPayment:
    """Tests for calculate_max_credit_payment."""

    def test_per_pool_capped_sum(self, solver):
        """Test that each pool pays the lesser of its money and its debt."""
        source = breakdown(("pool1", 200.0), ("pool2", 100.0))
        max_payment = solver.calculate_max_credit_payment(
            source,
            available_balances={"pool1": 300.0, "pool2": 50.0},
            credit_debt={"pool1": 150.0, "pool2": 80.0},
        )
        assert max_payment == 200.0

    def test_missing_pools_contribute_nothing(self, solver):
        """Test pools absent from either mapping."""
        source = breakdown(("pool1", 50.0), ("pool2", 50.0))
        max_payment = solver.calculate_max_credit_payment(
            source,
            available_balances={"pool1": 40.0},
            credit_debt={"pool2": 90.0},
        )
        assert max_payment == 0.0

    def test_negative_balances_clamped(self, solver):
        """Test that an overdrawn pool cannot reduce the total."""
        source = breakdown(("pool1", 50.0), ("pool2", 50.0))
        max_payment = solver.calculate_max_credit_payment(
            source,
            available_balances={"pool1": -20.0, "pool2": 30.0},
            credit_debt={"pool1": 100.0, "pool2": 100.0},
        )
        assert max_payment == 30.0


class TestMaximumPayableAmount:
    """Tests for calculate_maximum_payable_amount."""

    def test_breakdown_by_pool(self, solver):
        """Test the per-pool breakdown and total."""
        payable = solver.calculate_maximum_payable_amount(
            source_balances={"pool1": 300.0, "pool2": 50.0, "pool3": 10.0},
            destination_debts={"pool1": 150.0, "pool2": 80.0},
        )

        assert payable.max_amount == 200.0
        assert [(p.pool_id, p.payable_amount) for p in payable.breakdown] == [
            ("pool1", 150.0),
            ("pool2", 50.0),
        ]

    def test_wire_shape(self, solver):
        """Test camelCase serialization of the result."""
        payable = solver.calculate_maximum_payable_amount({"pool1": 10.0}, {"pool1": 5.0})
        assert payable.model_dump(by_alias=True) == {
            "maxAmount": 5.0,
            "breakdown": [{"poolId": "pool1", "payableAmount": 5.0}],
        }


class TestAllocationAgainstBalances:
    """Tests for validate_allocation_against_balances."""

    def test_shortfalls(self, solver):
        """Test items that ask for more than their pool holds."""
        allocation = breakdown(("pool1", 50.0), ("pool2", -80.0), ("pool3", 10.0))
        shortfalls = solver.validate_allocation_against_balances(
            allocation, {"pool1": 100.0, "pool2": 60.0}
        )

        assert [(s.pool_id, s.requested, s.available) for s in shortfalls] == [
            ("pool2", 80.0, 60.0),
            ("pool3", 10.0, 0.0),
        ]

    def test_no_shortfalls(self, solver):
        """Test an allocation fully covered by balances."""
        assert solver.validate_allocation_against_balances(
            breakdown(("pool1", 100.0)), {"pool1": 100.0}
        ) == []
