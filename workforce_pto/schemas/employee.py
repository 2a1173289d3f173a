# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field

from workforce_pto.models.enums import AllocationMode, EmployeeRole, EmployeeStatus
from workforce_pto.services.employee import EmployeePTO, PTOAllocation


class UpsertEmployeeRequest(BaseModel):
    """Request body for upserting an employee in the stub directory."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=1, max_length=255)
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    department: str | None = Field(default=None, max_length=100)
    start_date: date | None = None
    pto: EmployeePTO | None = None
    pto_allocation: PTOAllocation | None = None


class UpdateEmployeePTORequest(BaseModel):
    """Admin edit of balance components. Omitted fields are left unchanged."""

    vacation_beginning_balance: float | None = Field(default=None, ge=0)
    vacation_ongoing_balance: float | None = None
    vacation_used: float | None = Field(default=None, ge=0)
    vacation_first_year_rule: float | None = Field(default=None, ge=0)
    sick_leave_beginning_balance: float | None = Field(default=None, ge=0)
    sick_leave_used: float | None = Field(default=None, ge=0)
    start_date: date | None = None


class AllocationOverrideInput(BaseModel):
    type: AllocationMode = AllocationMode.AUTO
    hours: float | None = Field(default=None, ge=0)


class UpdateAllocationRequest(BaseModel):
    """Admin switch between automatic and manual allocation per leave type."""

    vacation: AllocationOverrideInput | None = None
    sick_leave: AllocationOverrideInput | None = None


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    id: uuid.UUID
    company_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    role: EmployeeRole
    status: EmployeeStatus
    department: str | None
    start_date: date | None
    pto: EmployeePTO
    pto_allocation: PTOAllocation


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int
