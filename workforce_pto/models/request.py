# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from workforce_pto.models.base import TimestampMixin, UUIDBase
from workforce_pto.models.enums import RequestStatus


class PTORequest(UUIDBase, TimestampMixin, table=True):
    """A claim against an employee's vacation or sick-leave balance."""

    __tablename__ = "pto_request"
    __table_args__ = (
        sa.Index("ix_pto_request_company_status", "company_id", "status"),
        sa.Index("ix_pto_request_employee_type", "company_id", "employee_id", "type"),
    )

    company_id: uuid.UUID = Field(index=True)
    employee_id: uuid.UUID = Field(index=True)
    type: str = Field(max_length=50)
    start_date: date
    end_date: date
    hours: int
    reason: str | None = None
    status: str = Field(
        default=RequestStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    created_by: uuid.UUID | None = None
    created_by_role: str | None = Field(default=None, max_length=50)
    reviewed_by: uuid.UUID | None = None
    reviewed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    review_note: str | None = None
