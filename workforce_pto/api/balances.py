# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from workforce_pto.api.deps import AuthDep, EmployeeServiceDep, TimesheetServiceDep, validate_company_scope
from workforce_pto.db import SessionDep
from workforce_pto.exceptions import AppError
from workforce_pto.schemas.balance import BalanceListResponse
from workforce_pto.services import balance as balance_service

employee_balance_router = APIRouter(
    prefix="/companies/{company_id}/employees/{employee_id}/balances",
    tags=["balances"],
    dependencies=[Depends(validate_company_scope)],
)


@employee_balance_router.get("", response_model=BalanceListResponse)
async def get_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    employees: EmployeeServiceDep,
    timesheets: TimesheetServiceDep,
    as_of: date | None = Query(default=None),
) -> BalanceListResponse:
    """Get the vacation and sick-leave balances for an employee."""
    if not auth.is_reviewer and employee_id != auth.user_id:
        raise AppError("Employees can only view their own balances", status_code=status.HTTP_403_FORBIDDEN)
    return await balance_service.get_employee_balances(
        session, auth.company_id, employee_id, employees, timesheets, today=as_of
    )
