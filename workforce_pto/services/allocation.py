from __future__ import annotations

from typing import TYPE_CHECKING

from workforce_pto.models.enums import AllocationMode

if TYPE_CHECKING:
    from collections.abc import Callable

    from workforce_pto.models.enums import LeaveType
    from workforce_pto.services.employee import EmployeeInfo


def effective_allocation_hours(
    employee: EmployeeInfo,
    leave_type: LeaveType,
    accrual_fn: Callable[[EmployeeInfo], float],
) -> float:
    """Hours allocated to the employee for ``leave_type``.

    Manual mode returns the administrator-entered hours as stored. Auto mode
    defers to the accrual rule.
    """
    override = employee.pto_allocation.for_type(leave_type)
    if override.type == AllocationMode.MANUAL:
        return override.hours or 0.0
    return accrual_fn(employee)
