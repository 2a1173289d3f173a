from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from workforce_pto.db import get_session
from workforce_pto.main import app
from workforce_pto.models import SQLModel
from workforce_pto.services.employee import InMemoryEmployeeService, set_employee_service
from workforce_pto.services.events import BalanceEventBus, set_balance_events
from workforce_pto.services.timesheet import InMemoryTimesheetService, set_timesheet_service

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

_SQLITE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create an async engine with every table in place.

    Defaults to an in-memory SQLite database. Point TEST_DATABASE_URL at a
    Postgres instance to exercise the real row locks.
    """
    url = os.environ.get("TEST_DATABASE_URL", _SQLITE_URL)
    if url.startswith("sqlite"):
        _engine = create_async_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    else:
        _engine = create_async_engine(url)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a database session wrapped in a transaction that rolls back after each test."""
    async with engine.connect() as conn:
        txn = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)
        yield session
        await session.close()
        await txn.rollback()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def employee_service() -> Iterator[InMemoryEmployeeService]:
    """Fresh in-memory Employee Directory installed for the test."""
    svc = InMemoryEmployeeService()
    set_employee_service(svc)
    yield svc
    set_employee_service(InMemoryEmployeeService())


@pytest.fixture
def timesheet_service() -> Iterator[InMemoryTimesheetService]:
    """Fresh in-memory Timesheet Store installed for the test."""
    svc = InMemoryTimesheetService()
    set_timesheet_service(svc)
    yield svc
    set_timesheet_service(InMemoryTimesheetService())


@pytest.fixture
def balance_events() -> Iterator[BalanceEventBus]:
    """Fresh balance-change bus installed for the test."""
    bus = BalanceEventBus()
    set_balance_events(bus)
    yield bus
    set_balance_events(BalanceEventBus())
