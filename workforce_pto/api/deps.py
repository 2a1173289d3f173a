# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, Path, status

from workforce_pto.exceptions import AppError
from workforce_pto.models.enums import EmployeeRole
from workforce_pto.schemas.auth import AuthContext
from workforce_pto.services.employee import EmployeeService, get_employee_service
from workforce_pto.services.events import BalanceEventBus, get_balance_events
from workforce_pto.services.timesheet import TimesheetService, get_timesheet_service


async def get_auth_context(
    x_company_id: uuid.UUID = Header(),
    x_user_id: uuid.UUID = Header(),
    x_role: EmployeeRole = Header(default=EmployeeRole.EMPLOYEE),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(company_id=x_company_id, user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if auth.role != EmployeeRole.ADMIN:
        raise AppError("Admin access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]


async def require_reviewer(
    auth: AuthDep,
) -> AuthContext:
    """Require an admin or manager role for the request."""
    if not auth.is_reviewer:
        raise AppError("Reviewer access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


ReviewerDep = Annotated[AuthContext, Depends(require_reviewer)]


async def validate_company_scope(
    company_id: uuid.UUID = Path(),
    auth: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """Ensure the path company_id matches the auth header company_id."""
    if company_id != auth.company_id:
        raise AppError("Company ID mismatch", status_code=status.HTTP_403_FORBIDDEN)
    return auth


EmployeeServiceDep = Annotated[EmployeeService, Depends(get_employee_service)]
TimesheetServiceDep = Annotated[TimesheetService, Depends(get_timesheet_service)]
BalanceEventsDep = Annotated[BalanceEventBus, Depends(get_balance_events)]
