from sqlmodel import SQLModel

from workforce_pto.models.audit import AuditLog
from workforce_pto.models.base import TimestampMixin, UUIDBase
from workforce_pto.models.enums import (
    AllocationMode,
    AuditAction,
    AuditEntityType,
    EmployeeRole,
    EmployeeStatus,
    LeaveType,
    RequestStatus,
    TimesheetStatus,
)
from workforce_pto.models.request import PTORequest
from workforce_pto.models.rules import PTOAllocationRules
from workforce_pto.models.tally import PTORequestTally

__all__ = [
    "AllocationMode",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "EmployeeRole",
    "EmployeeStatus",
    "LeaveType",
    "PTOAllocationRules",
    "PTORequest",
    "PTORequestTally",
    "RequestStatus",
    "SQLModel",
    "TimesheetStatus",
    "TimestampMixin",
    "UUIDBase",
]
