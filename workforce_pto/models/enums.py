from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Kind of leave a balance or request is drawn against."""

    VACATION = "vacation"
    SICK_LEAVE = "sick_leave"


class RequestStatus(enum.StrEnum):
    """State machine for PTO requests. APPROVED and REJECTED are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AllocationMode(enum.StrEnum):
    """Whether an employee's allocation follows the accrual rules or a fixed admin value."""

    AUTO = "auto"
    MANUAL = "manual"


class EmployeeRole(enum.StrEnum):
    """Role of a member within a company."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class EmployeeStatus(enum.StrEnum):
    """Employment status. Employees are deactivated, never deleted."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class TimesheetStatus(enum.StrEnum):
    """Review state of a weekly timesheet."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    REQUEST = "REQUEST"
    ALLOCATION_RULES = "ALLOCATION_RULES"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"


# Roles allowed to review requests and act on behalf of other employees.
REVIEWER_ROLES = frozenset({EmployeeRole.ADMIN, EmployeeRole.MANAGER})

# Request states whose hours are deducted from the available balance.
IN_FLIGHT_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.APPROVED})
