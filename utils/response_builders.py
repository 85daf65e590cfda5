"""
Shared response builder functions.

Centralizes the common patterns for building API response objects
from SQLAlchemy models with loaded relationships.
"""
from models import DailyRevenue, EmployeeRequest, WeeklyBonus
from schemas import (
    BonusLineResponse,
    DailyRevenueResponse,
    EmployeeRequestResponse,
    EmployeeRevenueResponse,
    WeeklyBonusDetailResponse,
    WeeklyBonusResponse,
)


def build_weekly_bonus_response(bonus: WeeklyBonus) -> WeeklyBonusResponse:
    """
    Build a WeeklyBonusResponse, filling in the branch name.

    Args:
        bonus: WeeklyBonus, ideally with its branch relationship loaded

    Returns:
        WeeklyBonusResponse without employee lines
    """
    data = WeeklyBonusResponse.model_validate(bonus)
    data.branch_name = bonus.branch.name if bonus.branch else None
    return data


def build_weekly_bonus_detail_response(bonus: WeeklyBonus) -> WeeklyBonusDetailResponse:
    """
    Build a WeeklyBonusDetailResponse with one line per employee.

    Args:
        bonus: WeeklyBonus with branch and details (and their employees) loaded
    """
    data = WeeklyBonusDetailResponse.model_validate(bonus)
    data.branch_name = bonus.branch.name if bonus.branch else None
    lines = []
    for detail in bonus.details:
        line = BonusLineResponse.model_validate(detail)
        line.employee_code = detail.employee.employee_code if detail.employee else None
        line.employee_name = detail.employee.name if detail.employee else None
        lines.append(line)
    data.details = lines
    return data


def build_daily_revenue_response(revenue: DailyRevenue) -> DailyRevenueResponse:
    """Build a DailyRevenueResponse with employee names on each contribution."""
    data = DailyRevenueResponse.model_validate(revenue)
    data.branch_name = revenue.branch.name if revenue.branch else None
    contributions = []
    for contribution in revenue.employee_revenues:
        item = EmployeeRevenueResponse.model_validate(contribution)
        item.employee_name = contribution.employee.name if contribution.employee else None
        contributions.append(item)
    data.employee_revenues = contributions
    return data


def build_employee_request_response(request: EmployeeRequest) -> EmployeeRequestResponse:
    data = EmployeeRequestResponse.model_validate(request)
    data.employee_name = request.employee.name if request.employee else None
    return data
