"""
Tests for weekly per-employee revenue aggregation.
"""
import pytest
from datetime import date
from decimal import Decimal

from models import Employee
from services.revenue_aggregator import NO_ACTIVE_EMPLOYEES, NO_DAILY_REVENUES, RevenueAggregator


class TestRevenueAggregator:
    """Test suite for RevenueAggregator.aggregate."""

    def test_sums_contributions_per_employee(self, repository, employees, add_daily_revenue):
        add_daily_revenue(1, date(2025, 3, 8), {1: "500.00", 2: "1000.00"})
        add_daily_revenue(1, date(2025, 3, 12), {1: "400.00", 2: "950.00"})

        result = RevenueAggregator(repository).aggregate(1, 2025, 3, 2)

        assert result.ok
        assert result.week_start == date(2025, 3, 8)
        assert result.week_end == date(2025, 3, 15)
        assert [(e.employee_id, e.weekly_revenue) for e in result.employees] == [
            (1, Decimal("900.00")),
            (2, Decimal("1950.00")),
        ]
        assert result.employees[0].employee_code == "E001"
        assert result.employees[1].employee_name == "Sara"
        assert result.total_revenue == Decimal("2850.00")

    def test_days_outside_the_bucket_are_ignored(self, repository, employees, add_daily_revenue):
        add_daily_revenue(1, date(2025, 3, 7), {1: "999.00"})
        add_daily_revenue(1, date(2025, 3, 16), {1: "999.00"})
        add_daily_revenue(1, date(2025, 3, 15), {1: "100.00"})

        result = RevenueAggregator(repository).aggregate(1, 2025, 3, 2)

        assert [e.weekly_revenue for e in result.employees] == [Decimal("100.00")]

    def test_zero_contribution_is_regular_entry(self, repository, employees, add_daily_revenue):
        add_daily_revenue(1, date(2025, 3, 9), {1: "0.00", 2: "250.00"})

        result = RevenueAggregator(repository).aggregate(1, 2025, 3, 2)

        assert result.ok
        assert result.employees[0].weekly_revenue == Decimal("0.00")

    def test_no_daily_revenues(self, repository, employees):
        result = RevenueAggregator(repository).aggregate(1, 2025, 3, 2)

        assert not result.ok
        assert result.failure == NO_DAILY_REVENUES
        assert result.employees == []
        assert result.message == "No daily revenues found for branch 1 between 2025-03-08 and 2025-03-15"

    def test_no_active_employees(self, repository, branch):
        result = RevenueAggregator(repository).aggregate(1, 2025, 3, 2)

        assert not result.ok
        assert result.failure == NO_ACTIVE_EMPLOYEES
        assert result.message == "No active employees found for branch 1"

    def test_inactive_employees_do_not_count(self, repository, db_session, branch):
        db_session.add(Employee(id=9, branch_id=1, employee_code="E009", name="Former", is_active=False))
        db_session.commit()

        result = RevenueAggregator(repository).aggregate(1, 2025, 3, 2)

        assert result.failure == NO_ACTIVE_EMPLOYEES
