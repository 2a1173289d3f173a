from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import select
from sqlmodel import col

from workforce_pto.config import get_settings
from workforce_pto.exceptions import AppError, CollaboratorUnavailableError
from workforce_pto.models.enums import IN_FLIGHT_STATUSES, AllocationMode, LeaveType, RequestStatus
from workforce_pto.models.request import PTORequest
from workforce_pto.schemas.balance import BalanceListResponse, BalanceResponse
from workforce_pto.services.accrual import accrued_sick_leave_hours, accrued_vacation_hours
from workforce_pto.services.allocation import effective_allocation_hours
from workforce_pto.services.employee import AllocationOverride
from workforce_pto.services.events import BalanceChanged
from workforce_pto.services.rules import get_allocation_rules

if TYPE_CHECKING:
    import uuid
    from collections.abc import Awaitable, Callable, Iterable

    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce_pto.schemas.employee import UpdateAllocationRequest, UpdateEmployeePTORequest
    from workforce_pto.schemas.rules import AllocationRules
    from workforce_pto.services.employee import EmployeeInfo, EmployeeService
    from workforce_pto.services.events import BalanceEventBus
    from workforce_pto.services.timesheet import TimesheetInfo, TimesheetService

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


@dataclass(frozen=True)
class BalanceBreakdown:
    """Every term of the balance formula for one employee and leave type."""

    leave_type: LeaveType
    allocation_mode: AllocationMode
    beginning_balance: float
    ongoing_balance: float
    accrued_hours: float
    allocated_hours: float
    used_hours: float
    pending_hours: float
    approved_hours: float

    @property
    def base_hours(self) -> float:
        return self.beginning_balance + self.ongoing_balance + self.allocated_hours - self.used_hours

    @property
    def in_flight_hours(self) -> float:
        return self.pending_hours + self.approved_hours

    @property
    def available(self) -> float:
        return max(0.0, self.base_hours - self.in_flight_hours)


# ---------------------------------------------------------------------------
# Pure computation (no I/O)
# ---------------------------------------------------------------------------


def _accrual_fn(
    leave_type: LeaveType,
    approved_timesheets: list[TimesheetInfo],
    rules: AllocationRules,
    today: date,
) -> Callable[[EmployeeInfo], float]:
    def _vacation(employee: EmployeeInfo) -> float:
        if employee.start_date is None:
            logger.warning("Employee %s has no start date; vacation accrual is zero", employee.id)
            return 0
        return accrued_vacation_hours(employee.start_date, today, rules, employee.pto.vacation.first_year_rule)

    def _sick_leave(employee: EmployeeInfo) -> float:
        if employee.start_date is None:
            logger.warning("Employee %s has no start date; sick-leave accrual is zero", employee.id)
            return 0
        return accrued_sick_leave_hours(
            approved_timesheets, employee.start_date, today, rules.sick_leave_accrual_hours
        )

    return _vacation if leave_type == LeaveType.VACATION else _sick_leave


def compute_balance(
    employee: EmployeeInfo,
    leave_type: LeaveType,
    approved_timesheets: Iterable[TimesheetInfo],
    in_flight_requests: Iterable[PTORequest],
    rules: AllocationRules,
    today: date,
) -> BalanceBreakdown:
    """Reconcile an employee's balance for ``leave_type`` as of ``today``.

    base = beginning + ongoing (vacation only) + allocation - used, then the
    hours of pending and approved requests of the same type are deducted.
    The available figure is clamped at zero.
    """
    timesheets = list(approved_timesheets)
    accrual_fn = _accrual_fn(leave_type, timesheets, rules, today)

    if leave_type == LeaveType.VACATION:
        beginning = employee.pto.vacation.beginning_balance
        ongoing = employee.pto.vacation.ongoing_balance
        used = employee.pto.vacation.used
    else:
        beginning = employee.pto.sick_leave.beginning_balance
        ongoing = 0.0
        used = employee.pto.sick_leave.used

    pending = 0.0
    approved = 0.0
    for request in in_flight_requests:
        status = RequestStatus(request.status)
        if request.type != leave_type or status not in IN_FLIGHT_STATUSES:
            continue
        if status == RequestStatus.PENDING:
            pending += request.hours
        else:
            approved += request.hours

    accrued = accrual_fn(employee)
    return BalanceBreakdown(
        leave_type=leave_type,
        allocation_mode=employee.pto_allocation.for_type(leave_type).type,
        beginning_balance=beginning,
        ongoing_balance=ongoing,
        accrued_hours=accrued,
        allocated_hours=effective_allocation_hours(employee, leave_type, lambda _: accrued),
        used_hours=used,
        pending_hours=pending,
        approved_hours=approved,
    )


def available_balance(
    employee: EmployeeInfo,
    leave_type: LeaveType,
    approved_timesheets: Iterable[TimesheetInfo],
    in_flight_requests: Iterable[PTORequest],
    rules: AllocationRules,
    today: date,
) -> float:
    """Hours the employee can still request for ``leave_type``. Never negative."""
    return compute_balance(employee, leave_type, approved_timesheets, in_flight_requests, rules, today).available


# ---------------------------------------------------------------------------
# Loading inputs
# ---------------------------------------------------------------------------


async def _call_collaborator(awaitable: Awaitable[_T], what: str) -> _T:
    """Await a directory call, failing closed on error or timeout."""
    timeout = get_settings().collaborator_timeout_seconds
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except Exception as exc:
        logger.exception("Fetching %s failed", what)
        raise CollaboratorUnavailableError(f"Cannot compute balance: {what} unavailable") from exc


async def fetch_employee(
    employees: EmployeeService,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
) -> EmployeeInfo:
    """Fetch an employee from the directory. Raises 404 if not found."""
    employee = await _call_collaborator(employees.get_employee(company_id, employee_id), "employee record")
    if employee is None:
        raise AppError("Employee not found", status_code=404)
    return employee


async def list_in_flight_requests(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
) -> list[PTORequest]:
    """Pending and approved requests of one employee and leave type."""
    query = select(PTORequest).where(
        col(PTORequest.company_id) == company_id,
        col(PTORequest.employee_id) == employee_id,
        col(PTORequest.type) == leave_type.value,
        col(PTORequest.status).in_([s.value for s in IN_FLIGHT_STATUSES]),
    )
    result = await session.execute(query)
    return list(result.scalars().all())


async def load_balance(
    session: AsyncSession,
    employee: EmployeeInfo,
    leave_type: LeaveType,
    timesheets: TimesheetService,
    today: date,
    in_flight: tuple[float, float] | None = None,
) -> BalanceBreakdown:
    """Gather every input for one balance, then reconcile it.

    Rules and in-flight requests are read through the same session, so a
    caller holding the request tally lock sees a consistent ledger. Such a
    caller passes the tally's ``(pending, approved)`` hours as ``in_flight``
    and the request rows are not re-summed.
    """
    approved_timesheets: list[TimesheetInfo] = []
    if leave_type == LeaveType.SICK_LEAVE:
        approved_timesheets = await _call_collaborator(
            timesheets.list_approved_timesheets(employee.company_id, employee.id), "timesheets"
        )
    rules = await get_allocation_rules(session, employee.company_id)
    if in_flight is not None:
        breakdown = compute_balance(employee, leave_type, approved_timesheets, [], rules, today)
        pending, approved = in_flight
        return replace(breakdown, pending_hours=pending, approved_hours=approved)

    requests = await list_in_flight_requests(session, employee.company_id, employee.id, leave_type)
    return compute_balance(employee, leave_type, approved_timesheets, requests, rules, today)


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


def _build_balance_response(employee: EmployeeInfo, breakdown: BalanceBreakdown, today: date) -> BalanceResponse:
    return BalanceResponse(
        employee_id=employee.id,
        leave_type=breakdown.leave_type,
        as_of=today,
        allocation_mode=breakdown.allocation_mode,
        beginning_balance=breakdown.beginning_balance,
        ongoing_balance=breakdown.ongoing_balance,
        accrued_hours=breakdown.accrued_hours,
        allocated_hours=breakdown.allocated_hours,
        used_hours=breakdown.used_hours,
        pending_hours=breakdown.pending_hours,
        approved_hours=breakdown.approved_hours,
        base_hours=breakdown.base_hours,
        available_hours=breakdown.available,
    )


async def get_employee_balances(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    employees: EmployeeService,
    timesheets: TimesheetService,
    today: date | None = None,
) -> BalanceListResponse:
    """Vacation and sick-leave balances for an employee."""
    today = today or date.today()
    employee = await fetch_employee(employees, company_id, employee_id)

    items = []
    for leave_type in LeaveType:
        breakdown = await load_balance(session, employee, leave_type, timesheets, today)
        items.append(_build_balance_response(employee, breakdown, today))
    return BalanceListResponse(items=items, total=len(items))


# ---------------------------------------------------------------------------
# Admin edits
# ---------------------------------------------------------------------------


async def save_employee(
    employees: EmployeeService,
    employee: EmployeeInfo,
    events: BalanceEventBus | None = None,
) -> EmployeeInfo:
    """Create or replace a directory record and announce the balance change."""
    saved = await _call_collaborator(employees.upsert_employee(employee), "employee record")
    logger.info("Employee %s saved to the directory", employee.id)
    if events is not None:
        events.publish(
            BalanceChanged(
                company_id=employee.company_id, employee_id=employee.id, leave_type=None, reason="employee_upserted"
            )
        )
    return saved


async def update_employee_pto(
    employees: EmployeeService,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    payload: UpdateEmployeePTORequest,
    events: BalanceEventBus | None = None,
) -> EmployeeInfo:
    """Overwrite the balance components named in the payload.

    ``used`` is only ever changed here; reviewing a request never touches it.
    """
    employee = await fetch_employee(employees, company_id, employee_id)

    vacation_updates = {
        "beginning_balance": payload.vacation_beginning_balance,
        "ongoing_balance": payload.vacation_ongoing_balance,
        "used": payload.vacation_used,
        "first_year_rule": payload.vacation_first_year_rule,
    }
    sick_updates = {
        "beginning_balance": payload.sick_leave_beginning_balance,
        "used": payload.sick_leave_used,
    }
    vacation = employee.pto.vacation.model_copy(update={k: v for k, v in vacation_updates.items() if v is not None})
    sick_leave = employee.pto.sick_leave.model_copy(update={k: v for k, v in sick_updates.items() if v is not None})

    pto = employee.pto.model_copy(update={"vacation": vacation, "sick_leave": sick_leave})
    employee_updates: dict[str, Any] = {"pto": pto}
    if payload.start_date is not None:
        employee_updates["start_date"] = payload.start_date

    updated = await _call_collaborator(
        employees.upsert_employee(employee.model_copy(update=employee_updates)), "employee record"
    )
    logger.info("PTO components updated for employee %s", employee_id)
    if events is not None:
        events.publish(
            BalanceChanged(company_id=company_id, employee_id=employee_id, leave_type=None, reason="pto_updated")
        )
    return updated


async def update_employee_allocation(
    employees: EmployeeService,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    payload: UpdateAllocationRequest,
    events: BalanceEventBus | None = None,
) -> EmployeeInfo:
    """Switch leave types between automatic accrual and a manual allotment."""
    employee = await fetch_employee(employees, company_id, employee_id)

    allocation_updates: dict[str, AllocationOverride] = {}
    if payload.vacation is not None:
        allocation_updates["vacation"] = AllocationOverride(type=payload.vacation.type, hours=payload.vacation.hours)
    if payload.sick_leave is not None:
        allocation_updates["sick_leave"] = AllocationOverride(
            type=payload.sick_leave.type, hours=payload.sick_leave.hours
        )

    updated = await _call_collaborator(
        employees.upsert_employee(
            employee.model_copy(
                update={"pto_allocation": employee.pto_allocation.model_copy(update=allocation_updates)}
            )
        ),
        "employee record",
    )
    logger.info("Allocation mode updated for employee %s: %s", employee_id, sorted(allocation_updates))
    if events is not None:
        events.publish(
            BalanceChanged(company_id=company_id, employee_id=employee_id, leave_type=None, reason="allocation_updated")
        )
    return updated
