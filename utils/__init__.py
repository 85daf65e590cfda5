"""
Shared utility functions for the backend.
"""
from .response_builders import (
    build_daily_revenue_response,
    build_employee_request_response,
    build_weekly_bonus_detail_response,
    build_weekly_bonus_response,
)

__all__ = [
    "build_daily_revenue_response",
    "build_employee_request_response",
    "build_weekly_bonus_detail_response",
    "build_weekly_bonus_response",
]
