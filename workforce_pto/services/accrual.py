"""Accrual rules: tenure-based vacation and hours-worked sick leave.

Everything here is pure. Callers gather the employee, timesheets and
company rules first and pass them in.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from workforce_pto.models.enums import TimesheetStatus
from workforce_pto.services.tenure import tenure_months, tenure_years

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from workforce_pto.schemas.rules import AllocationRules
    from workforce_pto.services.timesheet import TimesheetInfo

_MONTHS_PER_YEAR = 12
_MIN_TIMESHEET_HOURS = 1


def accrued_vacation_hours(
    start_date: date,
    today: date,
    rules: AllocationRules,
    first_year_hours: float | None = None,
) -> int:
    """Vacation hours accrued as of ``today``.

    First year: the first-year allotment pro-rated by whole months worked.
    Second year: the second-year tier. Third year onwards: the third-year
    tier. ``first_year_hours`` is the employee-level override and wins over
    the company rule when given.
    """
    if start_date > today:
        return 0

    years = tenure_years(start_date, today)
    if years < 1:
        months = tenure_months(start_date, today)
        if months <= 0:
            return 0
        allotment = rules.first_year_hours if first_year_hours is None else first_year_hours
        return math.floor(allotment * months / _MONTHS_PER_YEAR)

    if years == 1:
        return rules.second_year_hours
    return rules.third_year_plus_hours


def _qualifies(timesheet: TimesheetInfo, start_date: date, today: date) -> bool:
    return (
        timesheet.status == TimesheetStatus.APPROVED
        and timesheet.week_start_date >= start_date
        and timesheet.week_end_date <= today
        and timesheet.total_hours >= _MIN_TIMESHEET_HOURS
    )


def qualifying_worked_hours(timesheets: Iterable[TimesheetInfo], start_date: date, today: date) -> float:
    """Sum worked hours from approved timesheets inside the employment window.

    Only entries whose clock-in date falls in [start_date, today] count, so
    backdated corrections outside the window are ignored even when their
    timesheet qualifies.
    """
    total = 0.0
    for timesheet in timesheets:
        if not _qualifies(timesheet, start_date, today):
            continue
        for entry in timesheet.time_entries:
            if start_date <= entry.clock_in.date() <= today:
                total += entry.worked_hours
    return total


def accrued_sick_leave_hours(
    timesheets: Iterable[TimesheetInfo],
    start_date: date,
    today: date,
    accrual_hours: int = 40,
) -> int:
    """Sick-leave hours earned: one hour per ``accrual_hours`` hours worked."""
    if start_date > today:
        return 0
    worked = qualifying_worked_hours(timesheets, start_date, today)
    return math.floor(worked / accrual_hours)
