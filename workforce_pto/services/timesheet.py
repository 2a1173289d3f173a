# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from workforce_pto.models.enums import TimesheetStatus


class TimeEntryInfo(BaseModel):
    """A single clock-in/clock-out span within a timesheet."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    clock_in: datetime
    clock_out: datetime | None = None  # None while still clocked in

    @property
    def worked_hours(self) -> float:
        if self.clock_out is None or self.clock_out <= self.clock_in:
            return 0.0
        return (self.clock_out - self.clock_in).total_seconds() / 3600


class TimesheetInfo(BaseModel):
    """Weekly timesheet from the Timesheet Store."""

    id: uuid.UUID
    company_id: uuid.UUID
    employee_id: uuid.UUID
    status: TimesheetStatus
    week_start_date: date
    week_end_date: date
    total_hours: float = 0
    time_entries: list[TimeEntryInfo] = Field(default_factory=list)


@runtime_checkable
class TimesheetService(Protocol):
    """Interface for the Timesheet Store."""

    async def list_approved_timesheets(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> list[TimesheetInfo]:
        """List an employee's approved timesheets with their time entries."""
        ...

    async def list_timesheets(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> list[TimesheetInfo]:
        """List an employee's timesheets in any status."""
        ...

    async def upsert_timesheet(self, timesheet: TimesheetInfo) -> TimesheetInfo:
        """Create or replace a timesheet."""
        ...


class InMemoryTimesheetService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._timesheets: dict[uuid.UUID, TimesheetInfo] = {}

    def seed(self, timesheet: TimesheetInfo) -> None:
        """Seed a timesheet for testing."""
        self._timesheets[timesheet.id] = timesheet

    async def list_timesheets(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> list[TimesheetInfo]:
        """List an employee's timesheets in any status, oldest week first."""
        items = [
            t for t in self._timesheets.values() if t.company_id == company_id and t.employee_id == employee_id
        ]
        return sorted(items, key=lambda t: t.week_start_date)

    async def list_approved_timesheets(self, company_id: uuid.UUID, employee_id: uuid.UUID) -> list[TimesheetInfo]:
        """List an employee's approved timesheets with their time entries."""
        items = await self.list_timesheets(company_id, employee_id)
        return [t for t in items if t.status == TimesheetStatus.APPROVED]

    async def upsert_timesheet(self, timesheet: TimesheetInfo) -> TimesheetInfo:
        """Create or replace a timesheet."""
        self.seed(timesheet)
        return timesheet


_timesheet_service: TimesheetService = InMemoryTimesheetService()


def get_timesheet_service() -> TimesheetService:
    """FastAPI dependency for the Timesheet Store."""
    return _timesheet_service


def set_timesheet_service(service: TimesheetService) -> None:
    """Override the service (for testing or production wiring)."""
    global _timesheet_service
    _timesheet_service = service
