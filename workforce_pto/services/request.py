# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from workforce_pto.exceptions import AppError, InsufficientBalanceError, InvalidTransitionError, ValidationError
from workforce_pto.models.enums import (
    IN_FLIGHT_STATUSES,
    REVIEWER_ROLES,
    AuditAction,
    AuditEntityType,
    EmployeeRole,
    LeaveType,
    RequestStatus,
)
from workforce_pto.models.request import PTORequest
from workforce_pto.models.tally import PTORequestTally
from workforce_pto.schemas.request import RequestListResponse, RequestResponse
from workforce_pto.services.audit import model_to_audit_dict, write_audit_log
from workforce_pto.services.balance import fetch_employee, load_balance
from workforce_pto.services.duration import calculate_requested_hours
from workforce_pto.services.events import BalanceChanged

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce_pto.schemas.auth import AuthContext
    from workforce_pto.schemas.request import SubmitRequestPayload, UpdateRequestPayload
    from workforce_pto.services.employee import EmployeeService
    from workforce_pto.services.events import BalanceEventBus
    from workforce_pto.services.timesheet import TimesheetService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: PTORequest) -> RequestResponse:
    """Map a request model to its response schema."""
    return RequestResponse(
        id=request.id,
        company_id=request.company_id,
        employee_id=request.employee_id,
        type=LeaveType(request.type),
        start_date=request.start_date,
        end_date=request.end_date,
        hours=request.hours,
        reason=request.reason,
        status=RequestStatus(request.status),
        created_by=request.created_by,
        reviewed_by=request.reviewed_by,
        reviewed_at=request.reviewed_at,
        review_note=request.review_note,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


async def _get_request_or_404(
    session: AsyncSession,
    company_id: uuid.UUID,
    request_id: uuid.UUID,
) -> PTORequest:
    """Fetch a request by ID scoped to company. Raises 404 if not found."""
    result = await session.execute(
        select(PTORequest).where(
            col(PTORequest.id) == request_id,
            col(PTORequest.company_id) == company_id,
        )
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise AppError("Request not found", status_code=404)
    return request


def _resolve_employee_id(auth: AuthContext, employee_id: uuid.UUID | None) -> uuid.UUID:
    """Decide whose balance a new request is filed against."""
    if auth.is_reviewer:
        if employee_id is None:
            raise ValidationError("employee_id is required when filing on behalf of an employee")
        return employee_id
    if employee_id is not None and employee_id != auth.user_id:
        raise AppError("Employees can only file requests for themselves", status_code=403)
    return auth.user_id


def _compute_hours(start_date: date, end_date: date, client_hours: int | None) -> int:
    """Validate the date range and return the hours the request must carry."""
    if end_date < start_date:
        raise ValidationError("end_date must not be before start_date")
    hours = calculate_requested_hours(start_date, end_date)
    if hours <= 0:
        raise ValidationError("Request covers no business days")
    if client_hours is not None and client_hours != hours:
        raise ValidationError(f"hours must be {hours} for {start_date.isoformat()} to {end_date.isoformat()}")
    return hours


async def _check_request_overlap(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    exclude_request_id: uuid.UUID | None = None,
) -> None:
    """Raise 409 if a pending or approved request of the same type shares a day."""
    query = select(PTORequest.id).where(
        col(PTORequest.company_id) == company_id,
        col(PTORequest.employee_id) == employee_id,
        col(PTORequest.type) == leave_type.value,
        col(PTORequest.status).in_([s.value for s in IN_FLIGHT_STATUSES]),
        col(PTORequest.start_date) <= end_date,
        col(PTORequest.end_date) >= start_date,
    )
    if exclude_request_id is not None:
        query = query.where(col(PTORequest.id) != exclude_request_id)

    result = await session.execute(query.limit(1))
    if result.scalar_one_or_none() is not None:
        raise AppError("Request overlaps with an existing pending or approved request", status_code=409)


async def _select_tally_for_update(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
) -> PTORequestTally | None:
    result = await session.execute(
        select(PTORequestTally)
        .where(
            col(PTORequestTally.company_id) == company_id,
            col(PTORequestTally.employee_id) == employee_id,
            col(PTORequestTally.leave_type) == leave_type.value,
        )
        .with_for_update()
    )
    return result.scalar_one_or_none()


async def _insert_tally(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
) -> PTORequestTally:
    """Create the tally from the ledger, or lock the row a concurrent writer just created."""
    sums_result = await session.execute(
        select(col(PTORequest.status), func.coalesce(func.sum(col(PTORequest.hours)), 0))
        .where(
            col(PTORequest.company_id) == company_id,
            col(PTORequest.employee_id) == employee_id,
            col(PTORequest.type) == leave_type.value,
            col(PTORequest.status).in_([s.value for s in IN_FLIGHT_STATUSES]),
        )
        .group_by(col(PTORequest.status))
    )
    sums = {status: int(total) for status, total in sums_result.all()}
    tally = PTORequestTally(
        company_id=company_id,
        employee_id=employee_id,
        leave_type=leave_type.value,
        pending_hours=sums.get(RequestStatus.PENDING.value, 0),
        approved_hours=sums.get(RequestStatus.APPROVED.value, 0),
        version=1,
    )

    # Savepoint, so losing the insert race only rolls back this insert.
    try:
        async with session.begin_nested():
            session.add(tally)
            await session.flush()
    except IntegrityError:
        existing = await _select_tally_for_update(session, company_id, employee_id, leave_type)
        if existing is None:
            raise
        return existing
    return tally


async def _get_or_create_tally_for_update(
    session: AsyncSession,
    company_id: uuid.UUID,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
) -> PTORequestTally:
    """Lock the request tally with FOR UPDATE, creating it from the ledger if absent."""
    tally = await _select_tally_for_update(session, company_id, employee_id, leave_type)
    if tally is None:
        tally = await _insert_tally(session, company_id, employee_id, leave_type)
    return tally


def _apply_to_tally(tally: PTORequestTally, *, pending_delta: int = 0, approved_delta: int = 0) -> None:
    tally.pending_hours += pending_delta
    tally.approved_hours += approved_delta
    tally.version += 1


def _publish(events: BalanceEventBus | None, request: PTORequest, reason: str) -> None:
    if events is None:
        return
    events.publish(
        BalanceChanged(
            company_id=request.company_id,
            employee_id=request.employee_id,
            leave_type=LeaveType(request.type),
            reason=reason,
        )
    )


def _authorize_delete(auth: AuthContext, request: PTORequest) -> None:
    """Apply the deletion rules.

    Pending requests may be deleted by their owner or by a reviewer.
    Requests that an admin or manager filed may also be deleted by a
    reviewer after they have been decided.
    """
    is_pending = request.status == RequestStatus.PENDING.value
    if is_pending and (auth.user_id == request.employee_id or auth.is_reviewer):
        return

    filed_by_reviewer = request.created_by_role is not None and EmployeeRole(request.created_by_role) in REVIEWER_ROLES
    if auth.is_reviewer and filed_by_reviewer:
        return

    if not is_pending:
        raise InvalidTransitionError(f"Request is {request.status}; only pending requests can be deleted")
    raise AppError("Not authorized to delete this request", status_code=403)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitRequestPayload,
    *,
    employees: EmployeeService,
    timesheets: TimesheetService,
    events: BalanceEventBus | None = None,
    today: date | None = None,
) -> RequestResponse:
    """File a pending PTO request after checking it against the available balance.

    Flow:
    1. Resolve the employee and validate the date range and hours
    2. Fetch the employee record (must be active)
    3. Lock the request tally with SELECT FOR UPDATE
    4. Check for overlapping in-flight requests
    5. Reconcile the balance and reject if the hours exceed it
    6. Create the request (pending) and update the tally
    7. Write audit log, commit, publish
    """
    today = today or date.today()
    leave_type = payload.type

    # 1. Validate input before touching any collaborator.
    employee_id = _resolve_employee_id(auth, payload.employee_id)
    hours = _compute_hours(payload.start_date, payload.end_date, payload.hours)

    # 2. Employee record.
    employee = await fetch_employee(employees, auth.company_id, employee_id)
    if not employee.is_active:
        raise ValidationError("Employee is inactive")

    # 3. Lock tally.
    tally = await _get_or_create_tally_for_update(session, auth.company_id, employee_id, leave_type)

    # 4. Overlap, checked under the lock.
    await _check_request_overlap(
        session, auth.company_id, employee_id, leave_type, payload.start_date, payload.end_date
    )

    # 5. Balance check against the locked tally.
    breakdown = await load_balance(
        session, employee, leave_type, timesheets, today, in_flight=(tally.pending_hours, tally.approved_hours)
    )
    if hours > breakdown.available:
        logger.info(
            "Rejected %s request for employee %s: %dh requested, %.2fh available",
            leave_type,
            employee_id,
            hours,
            breakdown.available,
        )
        raise InsufficientBalanceError(hours, breakdown.available)

    # 6. Create request.
    pto_request = PTORequest(
        company_id=auth.company_id,
        employee_id=employee_id,
        type=leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        hours=hours,
        reason=payload.reason,
        status=RequestStatus.PENDING.value,
        created_by=auth.user_id,
        created_by_role=auth.role.value,
    )
    session.add(pto_request)
    _apply_to_tally(tally, pending_delta=hours)
    await session.flush()

    # 7. Audit, commit, notify.
    await write_audit_log(
        session,
        auth,
        entity_type=AuditEntityType.REQUEST,
        entity_id=pto_request.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(pto_request),
    )
    await session.commit()
    await session.refresh(pto_request)

    logger.info("Filed %s request %s for employee %s (%dh)", leave_type, pto_request.id, employee_id, hours)
    _publish(events, pto_request, "request_created")
    return _build_request_response(pto_request)


async def update_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: UpdateRequestPayload,
    *,
    employees: EmployeeService,
    timesheets: TimesheetService,
    events: BalanceEventBus | None = None,
    today: date | None = None,
) -> RequestResponse:
    """Edit the dates or reason of a pending request.

    Hours are recomputed from the new range and re-validated against the
    balance with the request's own hours excluded.
    """
    today = today or date.today()
    pto_request = await _get_request_or_404(session, auth.company_id, request_id)

    if pto_request.status != RequestStatus.PENDING.value:
        raise InvalidTransitionError(f"Request is {pto_request.status}; only pending requests can be edited")
    if auth.user_id != pto_request.employee_id and not auth.is_reviewer:
        raise AppError("Not authorized to edit this request", status_code=403)

    leave_type = LeaveType(pto_request.type)
    start_date = payload.start_date or pto_request.start_date
    end_date = payload.end_date or pto_request.end_date
    hours = _compute_hours(start_date, end_date, payload.hours)

    tally = await _get_or_create_tally_for_update(session, auth.company_id, pto_request.employee_id, leave_type)

    await _check_request_overlap(
        session,
        auth.company_id,
        pto_request.employee_id,
        leave_type,
        start_date,
        end_date,
        exclude_request_id=pto_request.id,
    )

    employee = await fetch_employee(employees, auth.company_id, pto_request.employee_id)
    # The request is pending, so its own hours come off the pending total.
    breakdown = await load_balance(
        session,
        employee,
        leave_type,
        timesheets,
        today,
        in_flight=(tally.pending_hours - pto_request.hours, tally.approved_hours),
    )
    if hours > breakdown.available:
        raise InsufficientBalanceError(hours, breakdown.available)

    before_dict = model_to_audit_dict(pto_request)
    hours_delta = hours - pto_request.hours

    pto_request.start_date = start_date
    pto_request.end_date = end_date
    pto_request.hours = hours
    if "reason" in payload.model_fields_set:
        pto_request.reason = payload.reason
    pto_request.updated_at = datetime.now(UTC)
    _apply_to_tally(tally, pending_delta=hours_delta)

    await session.flush()

    await write_audit_log(
        session,
        auth,
        entity_type=AuditEntityType.REQUEST,
        entity_id=pto_request.id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(pto_request),
    )
    await session.commit()
    await session.refresh(pto_request)

    _publish(events, pto_request, "request_updated")
    return _build_request_response(pto_request)


async def review_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    decision: RequestStatus,
    note: str | None = None,
    *,
    events: BalanceEventBus | None = None,
) -> RequestResponse:
    """Approve or reject a pending request. Both outcomes are terminal.

    Approval leaves the hours counted as in-flight; it does not move them
    into the employee's ``used`` figure.
    """
    if not auth.is_reviewer:
        raise AppError("Reviewer access required", status_code=403)
    if decision not in (RequestStatus.APPROVED, RequestStatus.REJECTED):
        raise ValidationError("decision must be approved or rejected")

    pto_request = await _get_request_or_404(session, auth.company_id, request_id)
    if pto_request.status != RequestStatus.PENDING.value:
        raise InvalidTransitionError(f"Request is already {pto_request.status}; only pending requests can be reviewed")

    tally = await _get_or_create_tally_for_update(
        session, auth.company_id, pto_request.employee_id, LeaveType(pto_request.type)
    )

    before_dict = model_to_audit_dict(pto_request)
    now = datetime.now(UTC)

    pto_request.status = decision.value
    pto_request.reviewed_by = auth.user_id
    pto_request.reviewed_at = now
    pto_request.review_note = note
    pto_request.updated_at = now

    approved_delta = pto_request.hours if decision == RequestStatus.APPROVED else 0
    _apply_to_tally(tally, pending_delta=-pto_request.hours, approved_delta=approved_delta)

    await session.flush()

    await write_audit_log(
        session,
        auth,
        entity_type=AuditEntityType.REQUEST,
        entity_id=pto_request.id,
        action=AuditAction.APPROVE if decision == RequestStatus.APPROVED else AuditAction.REJECT,
        before_json=before_dict,
        after_json=model_to_audit_dict(pto_request),
    )
    await session.commit()
    await session.refresh(pto_request)

    logger.info("Request %s %s by %s", pto_request.id, decision, auth.user_id)
    _publish(events, pto_request, f"request_{decision}")
    return _build_request_response(pto_request)


async def delete_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    *,
    events: BalanceEventBus | None = None,
) -> None:
    """Delete a request, returning its in-flight hours to the balance."""
    pto_request = await _get_request_or_404(session, auth.company_id, request_id)
    _authorize_delete(auth, pto_request)

    tally = await _get_or_create_tally_for_update(
        session, auth.company_id, pto_request.employee_id, LeaveType(pto_request.type)
    )

    before_dict = model_to_audit_dict(pto_request)
    if pto_request.status == RequestStatus.PENDING.value:
        _apply_to_tally(tally, pending_delta=-pto_request.hours)
    elif pto_request.status == RequestStatus.APPROVED.value:
        _apply_to_tally(tally, approved_delta=-pto_request.hours)

    await session.delete(pto_request)
    await session.flush()

    await write_audit_log(
        session,
        auth,
        entity_type=AuditEntityType.REQUEST,
        entity_id=pto_request.id,
        action=AuditAction.DELETE,
        before_json=before_dict,
    )
    await session.commit()

    logger.info("Request %s deleted by %s", pto_request.id, auth.user_id)
    _publish(events, pto_request, "request_deleted")


async def get_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> RequestResponse:
    """Get a single request. Employees may only read their own."""
    pto_request = await _get_request_or_404(session, auth.company_id, request_id)
    if not auth.is_reviewer and pto_request.employee_id != auth.user_id:
        raise AppError("Not authorized to view this request", status_code=403)
    return _build_request_response(pto_request)


async def list_requests(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID | None = None,
    leave_type: LeaveType | None = None,
    status_filter: RequestStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> RequestListResponse:
    """List requests with optional filters, ordered by created_at DESC.

    ``start_date`` and ``end_date`` bound the request range: requests
    starting on or after ``start_date`` and ending on or before ``end_date``.
    """
    if not auth.is_reviewer:
        if employee_id is not None and employee_id != auth.user_id:
            raise AppError("Employees can only list their own requests", status_code=403)
        employee_id = auth.user_id

    base_filters = [col(PTORequest.company_id) == auth.company_id]
    if employee_id is not None:
        base_filters.append(col(PTORequest.employee_id) == employee_id)
    if leave_type is not None:
        base_filters.append(col(PTORequest.type) == leave_type.value)
    if status_filter is not None:
        base_filters.append(col(PTORequest.status) == status_filter.value)
    if start_date is not None:
        base_filters.append(col(PTORequest.start_date) >= start_date)
    if end_date is not None:
        base_filters.append(col(PTORequest.end_date) <= end_date)

    count_result = await session.execute(select(func.count()).select_from(PTORequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(PTORequest)
        .where(*base_filters)
        .order_by(col(PTORequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return RequestListResponse(
        items=[_build_request_response(r) for r in requests],
        total=total,
    )
