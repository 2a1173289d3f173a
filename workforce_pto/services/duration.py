from __future__ import annotations

from datetime import date, timedelta

HOURS_PER_BUSINESS_DAY = 8

_SATURDAY = 5


def count_business_days(start_date: date, end_date: date) -> int:
    """Count weekdays in the inclusive range [start_date, end_date].

    Operates on calendar dates, so no timezone conversion can shift a day
    across midnight. Returns 0 for an inverted range.
    """
    total = 0
    current = start_date
    one_day = timedelta(days=1)
    while current <= end_date:
        if current.weekday() < _SATURDAY:
            total += 1
        current += one_day
    return total


def calculate_requested_hours(start_date: date, end_date: date) -> int:
    """Hours a request for [start_date, end_date] must carry.

    Same-day requests are a fixed single workday. Longer ranges are eight
    hours per business day, so a weekend-only range yields 0.
    """
    if start_date == end_date:
        return HOURS_PER_BUSINESS_DAY
    return count_business_days(start_date, end_date) * HOURS_PER_BUSINESS_DAY
