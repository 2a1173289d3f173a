# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from workforce_pto.models.base import now_utc


class PTORequestTally(SQLModel, table=True):
    """Per employee and leave type running totals of in-flight request hours.

    Ledger writes lock this row first, so concurrent requests for the same
    employee and leave type validate against the balance one at a time, and
    read their in-flight hours from it.
    """

    __tablename__ = "pto_request_tally"
    __table_args__ = (sa.PrimaryKeyConstraint("company_id", "employee_id", "leave_type"),)

    company_id: uuid.UUID
    employee_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=50)
    pending_hours: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    approved_hours: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": sa.func.now()},
    )
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
