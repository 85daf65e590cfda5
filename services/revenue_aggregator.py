"""
Weekly revenue aggregation per employee.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from services.accounting import to_money
from services.bonus_repository import BonusRepository
from services.weeks import get_week_range

logger = logging.getLogger(__name__)

NO_ACTIVE_EMPLOYEES = "no_active_employees"
NO_DAILY_REVENUES = "no_daily_revenues"


@dataclass
class EmployeeWeeklyRevenue:
    employee_id: int
    employee_code: str
    employee_name: str
    weekly_revenue: Decimal


@dataclass
class AggregationResult:
    """
    Outcome of aggregating one bucket.

    `failure` is set (and `employees` empty) when there is nothing to
    aggregate; an employee whose contributions sum to zero is a regular
    entry with weekly_revenue 0.00.
    """
    week_start: date
    week_end: date
    employees: List[EmployeeWeeklyRevenue] = field(default_factory=list)
    failure: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def total_revenue(self) -> Decimal:
        return to_money(sum((e.weekly_revenue for e in self.employees), Decimal("0")))


class RevenueAggregator:
    """Sums employee contributions over a (branch, year, month, week) bucket."""

    def __init__(self, repository: BonusRepository):
        self.repository = repository

    def aggregate(self, branch_id: int, year: int, month: int, week_number: int) -> AggregationResult:
        week_start, week_end = get_week_range(year, month, week_number)

        if self.repository.count_active_employees(branch_id) == 0:
            logger.warning("Aggregation skipped: branch %s has no active employees", branch_id)
            return AggregationResult(
                week_start=week_start,
                week_end=week_end,
                failure=NO_ACTIVE_EMPLOYEES,
                message=f"No active employees found for branch {branch_id}",
            )

        rows = self.repository.sum_contributions_by_employee(branch_id, week_start, week_end)
        if not rows:
            # Distinguish "no entries at all" from "entries without contributions"
            entry_count = self.repository.count_daily_revenues(branch_id, week_start, week_end)
            logger.warning(
                "Aggregation found no contributions for branch %s %s..%s (%d daily entries)",
                branch_id, week_start, week_end, entry_count,
            )
            return AggregationResult(
                week_start=week_start,
                week_end=week_end,
                failure=NO_DAILY_REVENUES,
                message=(
                    f"No daily revenues found for branch {branch_id} "
                    f"between {week_start.isoformat()} and {week_end.isoformat()}"
                ),
            )

        employees = [
            EmployeeWeeklyRevenue(
                employee_id=row.employee_id,
                employee_code=row.employee_code,
                employee_name=row.name,
                weekly_revenue=to_money(row.weekly_revenue),
            )
            for row in rows
        ]
        return AggregationResult(week_start=week_start, week_end=week_end, employees=employees)
