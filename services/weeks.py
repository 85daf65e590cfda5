"""
Fixed weekly buckets within a calendar month.

Days 1-7 are week 1, 8-15 week 2, 16-22 week 3, 23-29 week 4 and 30-31
week 5. A bucket closes on day 7, 15, 22, 29 or on the last day of the
month, whichever applies.
"""
import calendar
from datetime import date
from typing import NamedTuple, Tuple

from constants import MIN_WEEK_NUMBER, MAX_WEEK_NUMBER
from services.exceptions import BonusValidationError

# (first day, nominal last day) per week number
WEEK_BOUNDS = {
    1: (1, 7),
    2: (8, 15),
    3: (16, 22),
    4: (23, 29),
    5: (30, 31),
}


class ClosingDay(NamedTuple):
    is_last: bool
    week_number: int


def get_week_number(day_of_month: int) -> int:
    """Map a day of the month (1-31) to its week bucket (1-5)."""
    if not 1 <= day_of_month <= 31:
        raise BonusValidationError(f"Day of month must be between 1 and 31, got {day_of_month}")
    for week_number, (_, last_day) in WEEK_BOUNDS.items():
        if day_of_month <= last_day:
            return week_number
    return MAX_WEEK_NUMBER


def is_closing_day(day: date) -> ClosingDay:
    """
    Whether `day` is the closing day of its week bucket.

    True on the 7th, 15th, 22nd and 29th, and on the final day of the month
    (which closes week 5, or week 4 in February).
    """
    week_number = get_week_number(day.day)
    month_end = calendar.monthrange(day.year, day.month)[1]
    is_last = day.day == WEEK_BOUNDS[week_number][1] or day.day == month_end
    return ClosingDay(is_last=is_last, week_number=week_number)


def validate_bucket(year: int, month: int, week_number: int) -> None:
    """Raise BonusValidationError unless (year, month, week_number) names a real bucket."""
    if not 1 <= month <= 12:
        raise BonusValidationError(f"Month must be between 1 and 12, got {month}")
    if not MIN_WEEK_NUMBER <= week_number <= MAX_WEEK_NUMBER:
        raise BonusValidationError(
            f"Week number must be between {MIN_WEEK_NUMBER} and {MAX_WEEK_NUMBER}, got {week_number}"
        )
    if not 1 <= year <= 9999:
        raise BonusValidationError(f"Invalid year {year}")
    month_end = calendar.monthrange(year, month)[1]
    if WEEK_BOUNDS[week_number][0] > month_end:
        raise BonusValidationError(
            f"Week {week_number} does not exist in {year}-{month:02d}"
        )


def get_week_range(year: int, month: int, week_number: int) -> Tuple[date, date]:
    """First and last calendar date of a bucket, clipped to the month end."""
    validate_bucket(year, month, week_number)
    first_day, last_day = WEEK_BOUNDS[week_number]
    month_end = calendar.monthrange(year, month)[1]
    return date(year, month, first_day), date(year, month, min(last_day, month_end))


def bucket_for_date(day: date) -> Tuple[int, int, int]:
    """(year, month, week_number) of the bucket containing `day`."""
    return day.year, day.month, get_week_number(day.day)
