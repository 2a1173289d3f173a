# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from workforce_pto.services.duration import HOURS_PER_BUSINESS_DAY


class VacationDayRange(BaseModel):
    """Vacation days granted for a tenure tier. The accrual uses ``min``."""

    min: int = Field(ge=0)
    max: int = Field(ge=0)

    @model_validator(mode="after")
    def _validate_range(self) -> Self:
        if self.min > self.max:
            msg = "min must not exceed max"
            raise ValueError(msg)
        return self


class AllocationRules(BaseModel):
    """Company-wide PTO allocation policy.

    The defaults reproduce the long-standing behaviour: 40 hours pro-rated
    over the first year, then a flat 80 hours. Raising the third-year tier
    turns on graduated accrual from the second anniversary.
    """

    first_year_vacation_days: int = Field(default=5, ge=0)
    second_year_vacation_days: VacationDayRange = Field(default_factory=lambda: VacationDayRange(min=10, max=10))
    third_year_plus_vacation_days: VacationDayRange = Field(
        default_factory=lambda: VacationDayRange(min=10, max=15)
    )
    sick_leave_accrual_hours: int = Field(default=40, gt=0, description="Hours worked per 1 hour of sick leave")

    @property
    def first_year_hours(self) -> int:
        return self.first_year_vacation_days * HOURS_PER_BUSINESS_DAY

    @property
    def second_year_hours(self) -> int:
        return self.second_year_vacation_days.min * HOURS_PER_BUSINESS_DAY

    @property
    def third_year_plus_hours(self) -> int:
        return self.third_year_plus_vacation_days.min * HOURS_PER_BUSINESS_DAY


class UpdateAllocationRulesRequest(AllocationRules):
    """Request body for replacing a company's allocation rules."""


class AllocationRulesResponse(AllocationRules):
    """Allocation rules as stored for a company."""

    company_id: uuid.UUID
    is_default: bool
    updated_by: uuid.UUID | None = None
    updated_at: datetime | None = None
