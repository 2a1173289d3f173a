# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status

from workforce_pto.api.deps import (
    AdminDep,
    AuthDep,
    BalanceEventsDep,
    EmployeeServiceDep,
    TimesheetServiceDep,
    validate_company_scope,
)
from workforce_pto.exceptions import AppError
from workforce_pto.schemas.employee import (
    EmployeeListResponse,
    EmployeeResponse,
    UpdateAllocationRequest,
    UpdateEmployeePTORequest,
    UpsertEmployeeRequest,
)
from workforce_pto.schemas.timesheet import TimesheetListResponse, UpsertTimesheetRequest
from workforce_pto.services import balance as balance_service
from workforce_pto.services.employee import EmployeeInfo
from workforce_pto.services.events import BalanceChanged
from workforce_pto.services.timesheet import TimesheetInfo

employees_router = APIRouter(
    prefix="/companies/{company_id}/employees",
    tags=["employees"],
    dependencies=[Depends(validate_company_scope)],
)


def _build_employee_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        company_id=employee.company_id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        role=employee.role,
        status=employee.status,
        department=employee.department,
        start_date=employee.start_date,
        pto=employee.pto,
        pto_allocation=employee.pto_allocation,
    )


@employees_router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def upsert_employee(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
    auth: AdminDep,
    employees: EmployeeServiceDep,
    events: BalanceEventsDep,
) -> EmployeeResponse:
    """Create or update an employee in the directory (admin only)."""
    employee = EmployeeInfo.model_validate({"id": employee_id, "company_id": company_id, **payload.model_dump()})
    employee = await balance_service.save_employee(employees, employee, events)
    return _build_employee_response(employee)


@employees_router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def get_employee(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    auth: AuthDep,
    employees: EmployeeServiceDep,
) -> EmployeeResponse:
    """Get employee info from the directory."""
    employee = await balance_service.fetch_employee(employees, company_id, employee_id)
    return _build_employee_response(employee)


@employees_router.get(
    "",
    response_model=EmployeeListResponse,
)
async def list_employees(
    company_id: uuid.UUID,
    auth: AuthDep,
    employees: EmployeeServiceDep,
) -> EmployeeListResponse:
    """List all employees for a company."""
    items = await employees.list_employees(company_id)
    return EmployeeListResponse(
        items=[_build_employee_response(e) for e in items],
        total=len(items),
    )


@employees_router.put(
    "/{employee_id}/pto",
    response_model=EmployeeResponse,
)
async def update_employee_pto(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    payload: UpdateEmployeePTORequest,
    auth: AdminDep,
    employees: EmployeeServiceDep,
    events: BalanceEventsDep,
) -> EmployeeResponse:
    """Edit an employee's balance components (admin only)."""
    employee = await balance_service.update_employee_pto(employees, company_id, employee_id, payload, events)
    return _build_employee_response(employee)


@employees_router.put(
    "/{employee_id}/allocation",
    response_model=EmployeeResponse,
)
async def update_employee_allocation(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    payload: UpdateAllocationRequest,
    auth: AdminDep,
    employees: EmployeeServiceDep,
    events: BalanceEventsDep,
) -> EmployeeResponse:
    """Switch an employee between automatic and manual allocation (admin only)."""
    employee = await balance_service.update_employee_allocation(employees, company_id, employee_id, payload, events)
    return _build_employee_response(employee)


# ---------------------------------------------------------------------------
# Timesheets
# ---------------------------------------------------------------------------


@employees_router.put(
    "/{employee_id}/timesheets/{timesheet_id}",
    response_model=TimesheetInfo,
)
async def upsert_timesheet(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    timesheet_id: uuid.UUID,
    payload: UpsertTimesheetRequest,
    auth: AdminDep,
    timesheets: TimesheetServiceDep,
    events: BalanceEventsDep,
) -> TimesheetInfo:
    """Create or update a timesheet in the store (admin only).

    When ``total_hours`` is omitted it is summed from the time entries.
    """
    total_hours = payload.total_hours
    if total_hours is None:
        total_hours = sum(entry.worked_hours for entry in payload.time_entries)

    timesheet = TimesheetInfo(
        id=timesheet_id,
        company_id=company_id,
        employee_id=employee_id,
        status=payload.status,
        week_start_date=payload.week_start_date,
        week_end_date=payload.week_end_date,
        total_hours=total_hours,
        time_entries=payload.time_entries,
    )
    timesheet = await timesheets.upsert_timesheet(timesheet)
    events.publish(
        BalanceChanged(
            company_id=company_id,
            employee_id=employee_id,
            leave_type=None,
            reason="timesheet_upserted",
        )
    )
    return timesheet


@employees_router.get(
    "/{employee_id}/timesheets",
    response_model=TimesheetListResponse,
)
async def list_timesheets(
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    auth: AuthDep,
    timesheets: TimesheetServiceDep,
) -> TimesheetListResponse:
    """List an employee's timesheets in any status."""
    if not auth.is_reviewer and employee_id != auth.user_id:
        raise AppError("Employees can only view their own timesheets", status_code=status.HTTP_403_FORBIDDEN)
    items = await timesheets.list_timesheets(company_id, employee_id)
    return TimesheetListResponse(items=items, total=len(items))
