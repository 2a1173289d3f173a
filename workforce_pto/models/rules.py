# ruff: noqa: TC003
from __future__ import annotations

import uuid

from sqlmodel import Field

from workforce_pto.models.base import TimestampMixin, UUIDBase


class PTOAllocationRules(UUIDBase, TimestampMixin, table=True):
    """Company-wide vacation tiers and sick-leave accrual ratio."""

    __tablename__ = "pto_allocation_rules"

    company_id: uuid.UUID = Field(unique=True, index=True)
    first_year_vacation_days: int = 5
    second_year_vacation_days_min: int = 10
    second_year_vacation_days_max: int = 10
    third_year_plus_vacation_days_min: int = 10
    third_year_plus_vacation_days_max: int = 15
    sick_leave_accrual_hours: int = 40
    updated_by: uuid.UUID | None = None
