# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from workforce_pto.models.enums import REVIEWER_ROLES, EmployeeRole


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    company_id: uuid.UUID
    user_id: uuid.UUID
    role: EmployeeRole = EmployeeRole.EMPLOYEE

    @property
    def is_reviewer(self) -> bool:
        return self.role in REVIEWER_ROLES
