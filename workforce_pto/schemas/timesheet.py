# ruff: noqa: TC001, TC003
from __future__ import annotations

from datetime import date
from typing import Self

from pydantic import BaseModel, Field, model_validator

from workforce_pto.models.enums import TimesheetStatus
from workforce_pto.services.timesheet import TimeEntryInfo, TimesheetInfo


class UpsertTimesheetRequest(BaseModel):
    """Request body for upserting a timesheet in the stub store."""

    status: TimesheetStatus
    week_start_date: date
    week_end_date: date
    total_hours: float | None = Field(default=None, ge=0)
    time_entries: list[TimeEntryInfo] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_week(self) -> Self:
        if self.week_end_date < self.week_start_date:
            msg = "week_end_date must not be before week_start_date"
            raise ValueError(msg)
        return self


class TimesheetListResponse(BaseModel):
    """An employee's timesheets."""

    items: list[TimesheetInfo]
    total: int
