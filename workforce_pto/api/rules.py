from __future__ import annotations

from fastapi import APIRouter, Depends

from workforce_pto.api.deps import AdminDep, AuthDep, validate_company_scope
from workforce_pto.db import SessionDep
from workforce_pto.schemas.rules import AllocationRulesResponse, UpdateAllocationRulesRequest
from workforce_pto.services import rules as rules_service

rules_router = APIRouter(
    prefix="/companies/{company_id}/allocation-rules",
    tags=["allocation-rules"],
    dependencies=[Depends(validate_company_scope)],
)


@rules_router.get("", response_model=AllocationRulesResponse)
async def get_allocation_rules(
    session: SessionDep,
    auth: AuthDep,
) -> AllocationRulesResponse:
    """Get the company's allocation rules (defaults when never saved)."""
    return await rules_service.get_allocation_rules_response(session, auth.company_id)


@rules_router.put("", response_model=AllocationRulesResponse)
async def update_allocation_rules(
    payload: UpdateAllocationRulesRequest,
    session: SessionDep,
    auth: AdminDep,
) -> AllocationRulesResponse:
    """Replace the company's allocation rules (admin only)."""
    return await rules_service.update_allocation_rules(session, auth, payload)
