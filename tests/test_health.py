from __future__ import annotations

import uuid
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_pto.db import get_session
from workforce_pto.main import app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


async def test_health_returns_ok(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "Workforce PTO"
    assert data["version"] == "0.1.0"
    assert data["environment"] == "development"
    assert data["checks"] == {"database": "ok"}


async def test_health_degraded_on_db_failure() -> None:
    """GET /health reports degraded when the ledger database is unreachable."""
    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.execute.side_effect = ConnectionError("DB unreachable")

    async def _broken_session() -> AsyncIterator[AsyncSession]:
        yield mock_session

    app.dependency_overrides[get_session] = _broken_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "degraded"
        assert data["checks"]["database"] == "error"
    finally:
        app.dependency_overrides.clear()


async def test_unknown_role_header_rejected(async_client: AsyncClient) -> None:
    company_id = uuid.uuid4()
    headers = {"X-Company-Id": str(company_id), "X-User-Id": str(uuid.uuid4()), "X-Role": "owner"}
    response = await async_client.get(f"/companies/{company_id}/allocation-rules", headers=headers)
    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"
