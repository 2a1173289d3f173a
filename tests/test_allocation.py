"""Tests for the allocation mode resolver."""

from __future__ import annotations

import uuid

from workforce_pto.models.enums import AllocationMode, LeaveType
from workforce_pto.services.allocation import effective_allocation_hours
from workforce_pto.services.employee import AllocationOverride, EmployeeInfo, PTOAllocation


def _employee(allocation: PTOAllocation | None = None) -> EmployeeInfo:
    return EmployeeInfo(
        id=uuid.uuid4(),
        company_id=uuid.uuid4(),
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        pto_allocation=allocation,
    )


def test_auto_mode_defers_to_accrual() -> None:
    employee = _employee()
    assert effective_allocation_hours(employee, LeaveType.VACATION, lambda _: 42) == 42


def test_manual_mode_uses_stored_hours() -> None:
    employee = _employee(PTOAllocation(vacation=AllocationOverride(type=AllocationMode.MANUAL, hours=120)))
    assert effective_allocation_hours(employee, LeaveType.VACATION, lambda _: 80) == 120


def test_manual_mode_without_hours_is_zero() -> None:
    employee = _employee(PTOAllocation(vacation=AllocationOverride(type=AllocationMode.MANUAL)))
    assert effective_allocation_hours(employee, LeaveType.VACATION, lambda _: 80) == 0


def test_manual_mode_does_not_call_accrual() -> None:
    calls: list[EmployeeInfo] = []

    def _accrual(employee: EmployeeInfo) -> float:
        calls.append(employee)
        return 80

    employee = _employee(PTOAllocation(sick_leave=AllocationOverride(type=AllocationMode.MANUAL, hours=10)))
    assert effective_allocation_hours(employee, LeaveType.SICK_LEAVE, _accrual) == 10
    assert calls == []


def test_modes_are_per_leave_type() -> None:
    employee = _employee(PTOAllocation(sick_leave=AllocationOverride(type=AllocationMode.MANUAL, hours=10)))
    assert effective_allocation_hours(employee, LeaveType.VACATION, lambda _: 80) == 80
    assert effective_allocation_hours(employee, LeaveType.SICK_LEAVE, lambda _: 80) == 10
