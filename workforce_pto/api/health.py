import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from workforce_pto.config import get_settings
from workforce_pto.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

CheckStatus = Literal["ok", "error"]


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded"]
    service: str
    version: str
    environment: str
    checks: dict[str, CheckStatus]


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report whether the ledger database is reachable.

    Balance reads also depend on the employee and timesheet directories,
    which are checked per call and fail closed with a 503.
    """
    settings = get_settings()
    checks: dict[str, CheckStatus] = {"database": "ok"}

    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database connectivity failed")
        checks["database"] = "error"

    return HealthResponse(
        status="ok" if all(value == "ok" for value in checks.values()) else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        checks=checks,
    )
