# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field, model_validator

from workforce_pto.models.enums import AllocationMode, EmployeeRole, EmployeeStatus, LeaveType

logger = logging.getLogger(__name__)


def _drop_nulls(data: Any) -> Any:
    """Remove null keys so partially filled directory records take field defaults."""
    if not isinstance(data, dict):
        return data
    return {k: v for k, v in data.items() if v is not None}


class _NullTolerantModel(BaseModel):
    @model_validator(mode="before")
    @classmethod
    def _default_null_fields(cls, data: Any) -> Any:
        return _drop_nulls(data)


class VacationPTO(_NullTolerantModel):
    """Vacation balance components, in hours."""

    beginning_balance: float = 0
    ongoing_balance: float = 0  # manual adjustments and transfers
    used: float = 0
    first_year_rule: float | None = None  # overrides the company first-year hours when set


class SickLeavePTO(_NullTolerantModel):
    """Sick-leave balance components, in hours."""

    beginning_balance: float = 0
    used: float = 0


class EmployeePTO(_NullTolerantModel):
    vacation: VacationPTO = Field(default_factory=VacationPTO)
    sick_leave: SickLeavePTO = Field(default_factory=SickLeavePTO)


class AllocationOverride(_NullTolerantModel):
    """Per leave type switch between rule-computed and admin-fixed hours."""

    type: AllocationMode = AllocationMode.AUTO
    hours: float | None = None


class PTOAllocation(_NullTolerantModel):
    vacation: AllocationOverride = Field(default_factory=AllocationOverride)
    sick_leave: AllocationOverride = Field(default_factory=AllocationOverride)

    def for_type(self, leave_type: LeaveType) -> AllocationOverride:
        return self.vacation if leave_type == LeaveType.VACATION else self.sick_leave


class EmployeeInfo(BaseModel):
    """Employee record from the Employee Directory.

    Records imported from older systems may lack the ``pto`` or
    ``pto_allocation`` structures, or carry nulls anywhere inside them.
    Those are normalised here to all-zero balances and automatic allocation,
    so the balance engine never has to re-check for them.
    """

    id: uuid.UUID
    company_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    department: str | None = None
    start_date: date | None = None
    pto: EmployeePTO = Field(default_factory=EmployeePTO)
    pto_allocation: PTOAllocation = Field(default_factory=PTOAllocation)

    @model_validator(mode="before")
    @classmethod
    def _default_missing_pto(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        missing = [key for key in ("pto", "pto_allocation") if data.get(key) is None]
        if "pto" in missing:
            logger.warning("Employee %s has no pto record; defaulting balances to zero", data.get("id"))
        if missing:
            data = {k: v for k, v in data.items() if k not in missing}
        return data

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE


@runtime_checkable
class EmployeeService(Protocol):
    """Interface for the Employee Directory."""

    async def get_employee(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch an employee record. Returns None if not found."""
        ...

    async def list_employees(self, company_id: uuid.UUID) -> list[EmployeeInfo]:
        """List all employees for a company."""
        ...

    async def upsert_employee(self, employee: EmployeeInfo) -> EmployeeInfo:
        """Create or replace an employee record."""
        ...


class InMemoryEmployeeService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[tuple[uuid.UUID, uuid.UUID], EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[(employee.company_id, employee.id)] = employee

    async def get_employee(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch an employee record. Returns None if not found."""
        return self._employees.get((company_id, employee_id))

    async def list_employees(self, company_id: uuid.UUID) -> list[EmployeeInfo]:
        """List all employees for a company."""
        return [e for e in self._employees.values() if e.company_id == company_id]

    async def upsert_employee(self, employee: EmployeeInfo) -> EmployeeInfo:
        """Create or replace an employee record."""
        self.seed(employee)
        return employee


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    """FastAPI dependency for the Employee Directory."""
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Override the service (for testing or production wiring)."""
    global _employee_service
    _employee_service = service
