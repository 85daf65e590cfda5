"""
Tests for money helpers and the daily revenue accounting check.

Rules checked by validate_revenue_matching (each within 0.01):
- balance == network
- total == cash + network
- employee_total == total
"""
import pytest
from decimal import Decimal

from services.accounting import (
    calculate_balance,
    calculate_total,
    money_equal,
    money_sum,
    to_money,
    validate_revenue_matching,
)


class TestToMoney:
    """Test suite for to_money rounding."""

    def test_rounds_half_up(self):
        assert to_money("10.005") == Decimal("10.01")
        assert to_money("10.004") == Decimal("10.00")

    def test_float_goes_through_str(self):
        """0.1 + 0.2 must not leak binary noise into cents."""
        assert to_money(0.1 + 0.2) == Decimal("0.30")

    def test_none_is_zero(self):
        assert to_money(None) == Decimal("0.00")

    def test_int_gets_two_places(self):
        assert str(to_money(1200)) == "1200.00"


class TestMoneyEqual:
    def test_within_one_cent_is_equal(self):
        assert money_equal(Decimal("100.00"), Decimal("100.01"))

    def test_beyond_one_cent_is_not_equal(self):
        assert not money_equal(Decimal("100.00"), Decimal("100.02"))

    def test_custom_tolerance(self):
        assert money_equal("100", "101", tolerance=Decimal("1.00"))


class TestCalculations:
    def test_calculate_total(self):
        assert calculate_total(Decimal("700.50"), Decimal("299.50")) == Decimal("1000.00")

    def test_calculate_balance(self):
        """Balance is employee total minus cash."""
        assert calculate_balance(Decimal("1000.00"), Decimal("700.00")) == Decimal("300.00")

    def test_money_sum_empty(self):
        assert money_sum([]) == Decimal("0.00")

    def test_money_sum_mixed_inputs(self):
        assert money_sum(["10.10", Decimal("5.05"), 3]) == Decimal("18.15")


class TestValidateRevenueMatching:
    """Test suite for validate_revenue_matching."""

    def test_matched_entry(self):
        """cash=700, network=300, total=1000, balance=300, employees=1000 reconciles."""
        result = validate_revenue_matching(
            cash=Decimal("700"), network=Decimal("300"), total=Decimal("1000"),
            balance=Decimal("300"), employee_total=Decimal("1000"),
        )
        assert result.is_matched is True
        assert result.reasons == []

    def test_one_cent_rounding_is_absorbed(self):
        result = validate_revenue_matching(
            cash=Decimal("700.00"), network=Decimal("300.00"), total=Decimal("1000.01"),
            balance=Decimal("299.99"), employee_total=Decimal("1000.00"),
        )
        assert result.is_matched is True

    def test_employee_total_mismatch_reports_only_that_rule(self):
        """Employees sum to 950 against a total of 1000: only the employee rule fails."""
        result = validate_revenue_matching(
            cash=Decimal("700"), network=Decimal("300"), total=Decimal("1000"),
            balance=Decimal("300"), employee_total=Decimal("950"),
        )
        assert result.is_matched is False
        assert len(result.reasons) == 1
        assert "Employee total (950.00)" in result.reasons[0]
        assert "total (1000.00)" in result.reasons[0]

    def test_balance_mismatch(self):
        result = validate_revenue_matching(
            cash=Decimal("700"), network=Decimal("300"), total=Decimal("1000"),
            balance=Decimal("250"), employee_total=Decimal("1000"),
        )
        assert result.is_matched is False
        assert result.reasons == ["Balance (250.00) does not equal network (300.00)"]

    def test_total_mismatch(self):
        result = validate_revenue_matching(
            cash=Decimal("700"), network=Decimal("300"), total=Decimal("1100"),
            balance=Decimal("300"), employee_total=Decimal("1100"),
        )
        assert result.is_matched is False
        assert result.reasons == ["Total (1100.00) does not equal cash + network (1000.00)"]

    def test_every_violation_is_reported_in_rule_order(self):
        result = validate_revenue_matching(
            cash=Decimal("700"), network=Decimal("300"), total=Decimal("900"),
            balance=Decimal("100"), employee_total=Decimal("800"),
        )
        assert result.is_matched is False
        assert len(result.reasons) == 3
        assert result.reasons[0].startswith("Balance")
        assert result.reasons[1].startswith("Total")
        assert result.reasons[2].startswith("Employee total")

    def test_network_short_by_100_breaks_balance_and_total(self):
        """
        cash=500, network=300, total=800, balance=300, employees=800 reconciles;
        lowering network to 200 with the rest unchanged breaks exactly the
        balance and cash + network rules.
        """
        matched = validate_revenue_matching(
            cash=Decimal("500"), network=Decimal("300"), total=Decimal("800"),
            balance=Decimal("300"), employee_total=Decimal("800"),
        )
        assert matched.is_matched is True

        result = validate_revenue_matching(
            cash=Decimal("500"), network=Decimal("200"), total=Decimal("800"),
            balance=Decimal("300"), employee_total=Decimal("800"),
        )
        assert result.is_matched is False
        assert result.reasons == [
            "Balance (300.00) does not equal network (200.00)",
            "Total (800.00) does not equal cash + network (700.00)",
        ]

    def test_all_zero_entry_is_matched(self):
        result = validate_revenue_matching(0, 0, 0, 0, 0)
        assert result.is_matched is True
