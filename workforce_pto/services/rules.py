from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from workforce_pto.models.enums import AuditAction, AuditEntityType
from workforce_pto.models.rules import PTOAllocationRules
from workforce_pto.schemas.rules import AllocationRules, AllocationRulesResponse, VacationDayRange
from workforce_pto.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from workforce_pto.schemas.auth import AuthContext
    from workforce_pto.schemas.rules import UpdateAllocationRulesRequest


def _to_allocation_rules(row: PTOAllocationRules) -> AllocationRules:
    return AllocationRules(
        first_year_vacation_days=row.first_year_vacation_days,
        second_year_vacation_days=VacationDayRange(
            min=row.second_year_vacation_days_min, max=row.second_year_vacation_days_max
        ),
        third_year_plus_vacation_days=VacationDayRange(
            min=row.third_year_plus_vacation_days_min, max=row.third_year_plus_vacation_days_max
        ),
        sick_leave_accrual_hours=row.sick_leave_accrual_hours,
    )


async def _get_rules_row(session: AsyncSession, company_id: uuid.UUID) -> PTOAllocationRules | None:
    result = await session.execute(
        select(PTOAllocationRules).where(col(PTOAllocationRules.company_id) == company_id)
    )
    return result.scalar_one_or_none()


async def get_allocation_rules(session: AsyncSession, company_id: uuid.UUID) -> AllocationRules:
    """Company allocation rules, or the defaults when none have been saved."""
    row = await _get_rules_row(session, company_id)
    if row is None:
        return AllocationRules()
    return _to_allocation_rules(row)


async def get_allocation_rules_response(session: AsyncSession, company_id: uuid.UUID) -> AllocationRulesResponse:
    row = await _get_rules_row(session, company_id)
    if row is None:
        return AllocationRulesResponse(company_id=company_id, is_default=True, **AllocationRules().model_dump())
    return AllocationRulesResponse(
        company_id=company_id,
        is_default=False,
        updated_by=row.updated_by,
        updated_at=row.updated_at,
        **_to_allocation_rules(row).model_dump(),
    )


async def update_allocation_rules(
    session: AsyncSession,
    auth: AuthContext,
    payload: UpdateAllocationRulesRequest,
) -> AllocationRulesResponse:
    """Replace a company's allocation rules, creating the row on first save."""
    row = await _get_rules_row(session, auth.company_id)
    before = model_to_audit_dict(row) if row is not None else None
    if row is None:
        row = PTOAllocationRules(company_id=auth.company_id)
        session.add(row)

    row.first_year_vacation_days = payload.first_year_vacation_days
    row.second_year_vacation_days_min = payload.second_year_vacation_days.min
    row.second_year_vacation_days_max = payload.second_year_vacation_days.max
    row.third_year_plus_vacation_days_min = payload.third_year_plus_vacation_days.min
    row.third_year_plus_vacation_days_max = payload.third_year_plus_vacation_days.max
    row.sick_leave_accrual_hours = payload.sick_leave_accrual_hours
    row.updated_by = auth.user_id

    await session.flush()

    await write_audit_log(
        session,
        auth,
        entity_type=AuditEntityType.ALLOCATION_RULES,
        entity_id=row.id,
        action=AuditAction.CREATE if before is None else AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(row),
    )

    await session.commit()
    await session.refresh(row)
    return await get_allocation_rules_response(session, auth.company_id)
