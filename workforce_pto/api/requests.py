# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from workforce_pto.api.deps import (
    AuthDep,
    BalanceEventsDep,
    EmployeeServiceDep,
    ReviewerDep,
    TimesheetServiceDep,
    validate_company_scope,
)
from workforce_pto.db import SessionDep
from workforce_pto.models.enums import LeaveType, RequestStatus
from workforce_pto.schemas.request import (
    DecisionPayload,
    RequestListResponse,
    RequestResponse,
    ReviewPayload,
    SubmitRequestPayload,
    UpdateRequestPayload,
)
from workforce_pto.services import request as request_service

requests_router = APIRouter(
    prefix="/companies/{company_id}/requests",
    tags=["requests"],
    dependencies=[Depends(validate_company_scope)],
)


@requests_router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitRequestPayload,
    session: SessionDep,
    auth: AuthDep,
    employees: EmployeeServiceDep,
    timesheets: TimesheetServiceDep,
    events: BalanceEventsDep,
) -> RequestResponse:
    """File a new PTO request against the employee's available balance."""
    return await request_service.submit_request(
        session, auth, payload, employees=employees, timesheets=timesheets, events=events
    )


@requests_router.get("", response_model=RequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    employee_id: uuid.UUID | None = Query(default=None),
    leave_type: LeaveType | None = Query(default=None, alias="type"),
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> RequestListResponse:
    """List PTO requests with optional filters."""
    return await request_service.list_requests(
        session,
        auth,
        employee_id=employee_id,
        leave_type=leave_type,
        status_filter=status_filter,
        start_date=start_date,
        end_date=end_date,
        offset=offset,
        limit=limit,
    )


@requests_router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RequestResponse:
    """Get a single PTO request."""
    return await request_service.get_request(session, auth, request_id)


@requests_router.patch("/{request_id}", response_model=RequestResponse)
async def update_request(
    request_id: uuid.UUID,
    payload: UpdateRequestPayload,
    session: SessionDep,
    auth: AuthDep,
    employees: EmployeeServiceDep,
    timesheets: TimesheetServiceDep,
    events: BalanceEventsDep,
) -> RequestResponse:
    """Edit the dates or reason of a pending request."""
    return await request_service.update_request(
        session, auth, request_id, payload, employees=employees, timesheets=timesheets, events=events
    )


@requests_router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    events: BalanceEventsDep,
) -> Response:
    """Delete a request and return its hours to the balance."""
    await request_service.delete_request(session, auth, request_id, events=events)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@requests_router.post("/{request_id}/review", response_model=RequestResponse)
async def review_request(
    request_id: uuid.UUID,
    payload: ReviewPayload,
    session: SessionDep,
    auth: ReviewerDep,
    events: BalanceEventsDep,
) -> RequestResponse:
    """Approve or reject a pending request (admin or manager)."""
    return await request_service.review_request(
        session, auth, request_id, RequestStatus(payload.decision), payload.note, events=events
    )


@requests_router.post("/{request_id}/approve", response_model=RequestResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ReviewerDep,
    events: BalanceEventsDep,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Approve a pending request (admin or manager)."""
    note = payload.note if payload else None
    return await request_service.review_request(
        session, auth, request_id, RequestStatus.APPROVED, note, events=events
    )


@requests_router.post("/{request_id}/reject", response_model=RequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: ReviewerDep,
    events: BalanceEventsDep,
    payload: DecisionPayload | None = None,
) -> RequestResponse:
    """Reject a pending request (admin or manager)."""
    note = payload.note if payload else None
    return await request_service.review_request(
        session, auth, request_id, RequestStatus.REJECTED, note, events=events
    )
