"""Whole-unit tenure between a start date and a reference date."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date


def tenure_months(start_date: date, today: date) -> int:
    """Complete months of service. A month counts once its day-of-month is reached."""
    if start_date > today:
        return 0
    months = (today.year - start_date.year) * 12 + (today.month - start_date.month)
    if today.day < start_date.day:
        months -= 1
    return max(months, 0)


def tenure_years(start_date: date, today: date) -> int:
    """Complete years of service. A year counts on the anniversary itself."""
    if start_date > today:
        return 0
    years = today.year - start_date.year
    if (today.month, today.day) < (start_date.month, start_date.day):
        years -= 1
    return max(years, 0)
