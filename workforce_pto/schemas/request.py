# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from workforce_pto.models.enums import LeaveType, RequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitRequestPayload(BaseModel):
    """Request body for filing a PTO request.

    ``employee_id`` may be omitted by employees filing for themselves. Admins
    and managers filing on someone's behalf must name the employee.
    ``hours`` is optional; when given it must match the server's count.
    """

    employee_id: uuid.UUID | None = None
    type: LeaveType
    start_date: date
    end_date: date
    hours: int | None = Field(default=None, ge=0)
    reason: str | None = Field(default=None, max_length=1000)


class UpdateRequestPayload(BaseModel):
    """Request body for editing a pending request."""

    start_date: date | None = None
    end_date: date | None = None
    hours: int | None = Field(default=None, ge=0)
    reason: str | None = Field(default=None, max_length=1000)


class ReviewPayload(BaseModel):
    """Request body for the review action."""

    decision: Literal["approved", "rejected"]
    note: str | None = Field(default=None, max_length=1000)


class DecisionPayload(BaseModel):
    """Request body for approve/reject shortcuts."""

    note: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestResponse(BaseModel):
    """Response schema for a single PTO request."""

    id: uuid.UUID
    company_id: uuid.UUID
    employee_id: uuid.UUID
    type: LeaveType
    start_date: date
    end_date: date
    hours: int
    reason: str | None
    status: RequestStatus
    created_by: uuid.UUID | None
    reviewed_by: uuid.UUID | None
    reviewed_at: datetime | None
    review_note: str | None
    created_at: datetime
    updated_at: datetime


class RequestListResponse(BaseModel):
    """Paginated list of PTO requests."""

    items: list[RequestResponse]
    total: int
