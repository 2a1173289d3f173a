# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel

from workforce_pto.models.enums import AllocationMode, LeaveType


class BalanceResponse(BaseModel):
    """Reconciled balance for one leave type, in hours."""

    employee_id: uuid.UUID
    leave_type: LeaveType
    as_of: date
    allocation_mode: AllocationMode
    beginning_balance: float
    ongoing_balance: float
    accrued_hours: float  # what the accrual rule yields, even when a manual override is active
    allocated_hours: float
    used_hours: float
    pending_hours: float
    approved_hours: float
    base_hours: float
    available_hours: float


class BalanceListResponse(BaseModel):
    """Vacation and sick-leave balances for an employee."""

    items: list[BalanceResponse]
    total: int
