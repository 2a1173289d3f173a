"""Integration tests for the employee directory API: records, PTO components,
allocation mode and timesheets.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from workforce_pto.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service
from workforce_pto.services.events import BalanceChanged, BalanceEventBus

if TYPE_CHECKING:
    from httpx import AsyncClient

    from workforce_pto.services.timesheet import InMemoryTimesheetService

COMPANY_ID = uuid.uuid4()
USER_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
AUTH_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(USER_ID),
    "X-Role": "admin",
}
EMPLOYEE_HEADERS = {
    "X-Company-Id": str(COMPANY_ID),
    "X-User-Id": str(EMPLOYEE_ID),
    "X-Role": "employee",
}
EMPLOYEES_URL = f"/companies/{COMPANY_ID}/employees"
BALANCES_URL = f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/balances"


@pytest.fixture(autouse=True)
def _fresh_directory(employee_service: InMemoryEmployeeService, timesheet_service: InMemoryTimesheetService) -> None:
    """Every test starts with an empty directory and timesheet store."""


def _employee_payload(
    first_name: str = "John",
    last_name: str = "Doe",
    email: str = "john@example.com",
    start_date: str | None = "2015-01-01",
    **extra: object,
) -> dict:
    return {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "start_date": start_date,
        **extra,
    }


async def _create_employee(client: AsyncClient, employee_id: uuid.UUID = EMPLOYEE_ID, **kwargs: object) -> dict:
    resp = await client.put(f"{EMPLOYEES_URL}/{employee_id}", json=_employee_payload(**kwargs), headers=AUTH_HEADERS)
    assert resp.status_code == 200, resp.text
    return resp.json()


async def _vacation_balance(client: AsyncClient, as_of: str | None = None) -> dict:
    params = {"as_of": as_of} if as_of else None
    resp = await client.get(BALANCES_URL, params=params, headers=AUTH_HEADERS)
    assert resp.status_code == 200, resp.text
    return next(item for item in resp.json()["items"] if item["leave_type"] == "vacation")


# ---------------------------------------------------------------------------
# Upsert / get / list
# ---------------------------------------------------------------------------


async def test_upsert_employee_creates(async_client: AsyncClient) -> None:
    data = await _create_employee(async_client, role="manager", department="Ops")
    assert data["id"] == str(EMPLOYEE_ID)
    assert data["company_id"] == str(COMPANY_ID)
    assert data["role"] == "manager"
    assert data["status"] == "active"
    assert data["department"] == "Ops"
    assert data["pto"]["vacation"]["beginning_balance"] == 0
    assert data["pto_allocation"]["vacation"]["type"] == "auto"


async def test_upsert_employee_updates(async_client: AsyncClient) -> None:
    await _create_employee(async_client)
    data = await _create_employee(async_client, first_name="Jane", status="inactive")
    assert data["first_name"] == "Jane"
    assert data["status"] == "inactive"


async def test_upsert_employee_with_pto(async_client: AsyncClient) -> None:
    data = await _create_employee(
        async_client,
        pto={"vacation": {"beginning_balance": 12, "ongoing_balance": 4, "used": 0}, "sick_leave": {"used": 2}},
    )
    assert data["pto"]["vacation"]["beginning_balance"] == 12
    assert data["pto"]["sick_leave"]["used"] == 2


async def test_upsert_employee_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}", json=_employee_payload(), headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 403


async def test_upsert_employee_validation(async_client: AsyncClient) -> None:
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}", json=_employee_payload(first_name=""), headers=AUTH_HEADERS
    )
    assert resp.status_code == 422


async def test_upsert_employee_partial_pto_defaults_to_zero(async_client: AsyncClient) -> None:
    data = await _create_employee(
        async_client,
        pto={"vacation": {"beginning_balance": None, "used": 4}, "sick_leave": None},
        pto_allocation={"vacation": None, "sick_leave": {"type": None, "hours": None}},
    )
    assert data["pto"]["vacation"]["beginning_balance"] == 0
    assert data["pto"]["vacation"]["used"] == 4
    assert data["pto"]["sick_leave"] == {"beginning_balance": 0, "used": 0}
    assert data["pto_allocation"]["vacation"] == {"type": "auto", "hours": None}
    assert data["pto_allocation"]["sick_leave"] == {"type": "auto", "hours": None}


class _UnavailableDirectory(InMemoryEmployeeService):
    async def upsert_employee(self, employee: EmployeeInfo) -> EmployeeInfo:
        raise ConnectionError("directory down")


async def test_upsert_employee_directory_down_returns_503(async_client: AsyncClient) -> None:
    set_employee_service(_UnavailableDirectory())
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}", json=_employee_payload(), headers=AUTH_HEADERS
    )
    assert resp.status_code == 503
    assert resp.json()["error"] == "CollaboratorUnavailableError"


async def test_get_employee(async_client: AsyncClient) -> None:
    await _create_employee(async_client)
    resp = await async_client.get(f"{EMPLOYEES_URL}/{EMPLOYEE_ID}", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["email"] == "john@example.com"


async def test_get_employee_not_found(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"{EMPLOYEES_URL}/{uuid.uuid4()}", headers=AUTH_HEADERS)
    assert resp.status_code == 404


async def test_list_employees(async_client: AsyncClient) -> None:
    await _create_employee(async_client)
    await _create_employee(async_client, uuid.uuid4(), email="jane@example.com")
    resp = await async_client.get(EMPLOYEES_URL, headers=AUTH_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["total"] == 2


async def test_employee_company_scope(async_client: AsyncClient) -> None:
    other_company = uuid.uuid4()
    resp = await async_client.get(f"/companies/{other_company}/employees", headers=AUTH_HEADERS)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# PTO components and allocation mode
# ---------------------------------------------------------------------------


async def test_update_pto_components(async_client: AsyncClient) -> None:
    await _create_employee(async_client)
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/pto",
        json={"vacation_beginning_balance": 10, "vacation_used": 30},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 200
    vacation = resp.json()["pto"]["vacation"]
    assert vacation["beginning_balance"] == 10
    assert vacation["used"] == 30
    assert vacation["ongoing_balance"] == 0

    balance = await _vacation_balance(async_client)
    assert balance["available_hours"] == 60


async def test_update_pto_first_year_rule(async_client: AsyncClient) -> None:
    await _create_employee(async_client, start_date="2024-01-01")
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/pto", json={"vacation_first_year_rule": 24}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 200

    balance = await _vacation_balance(async_client, as_of="2024-07-01")
    assert balance["accrued_hours"] == 12


async def test_update_pto_requires_admin(async_client: AsyncClient) -> None:
    await _create_employee(async_client)
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/pto", json={"vacation_used": 0}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 403


async def test_update_pto_unknown_employee(async_client: AsyncClient) -> None:
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{uuid.uuid4()}/pto", json={"vacation_used": 0}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 404


async def test_manual_allocation_overrides_accrual(async_client: AsyncClient) -> None:
    await _create_employee(async_client)
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/allocation",
        json={"vacation": {"type": "manual", "hours": 120}},
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["pto_allocation"]["vacation"] == {"type": "manual", "hours": 120}
    assert resp.json()["pto_allocation"]["sick_leave"]["type"] == "auto"

    balance = await _vacation_balance(async_client)
    assert balance["allocation_mode"] == "manual"
    assert balance["accrued_hours"] == 80
    assert balance["available_hours"] == 120


async def test_switch_back_to_auto(async_client: AsyncClient) -> None:
    await _create_employee(async_client)
    url = f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/allocation"
    await async_client.put(url, json={"vacation": {"type": "manual", "hours": 120}}, headers=AUTH_HEADERS)
    await async_client.put(url, json={"vacation": {"type": "auto"}}, headers=AUTH_HEADERS)

    balance = await _vacation_balance(async_client)
    assert balance["allocation_mode"] == "auto"
    assert balance["available_hours"] == 80


async def test_admin_edits_publish_balance_changes(
    async_client: AsyncClient, balance_events: BalanceEventBus
) -> None:
    await _create_employee(async_client)
    received: list[BalanceChanged] = []
    balance_events.subscribe(received.append)

    await async_client.put(f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/pto", json={"vacation_used": 8}, headers=AUTH_HEADERS)
    await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/allocation",
        json={"sick_leave": {"type": "manual", "hours": 16}},
        headers=AUTH_HEADERS,
    )
    assert [event.reason for event in received] == ["pto_updated", "allocation_updated"]
    assert all(event.leave_type is None for event in received)


# ---------------------------------------------------------------------------
# Timesheets
# ---------------------------------------------------------------------------


def _timesheet_payload(status: str = "approved", hours: int = 40) -> dict:
    clock_in = datetime(2024, 1, 2, 9, tzinfo=UTC)
    return {
        "status": status,
        "week_start_date": "2024-01-01",
        "week_end_date": "2024-01-07",
        "time_entries": [
            {"clock_in": clock_in.isoformat(), "clock_out": (clock_in + timedelta(hours=hours)).isoformat()}
        ],
    }


async def test_upsert_timesheet_sums_entries(async_client: AsyncClient) -> None:
    timesheet_id = uuid.uuid4()
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/timesheets/{timesheet_id}",
        json=_timesheet_payload(hours=40),
        headers=AUTH_HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == str(timesheet_id)
    assert data["total_hours"] == 40


async def test_upsert_timesheet_rejects_inverted_week(async_client: AsyncClient) -> None:
    payload = {**_timesheet_payload(), "week_start_date": "2024-01-08"}
    resp = await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/timesheets/{uuid.uuid4()}", json=payload, headers=AUTH_HEADERS
    )
    assert resp.status_code == 422


async def test_list_timesheets(async_client: AsyncClient) -> None:
    await async_client.put(
        f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/timesheets/{uuid.uuid4()}",
        json=_timesheet_payload(status="draft"),
        headers=AUTH_HEADERS,
    )
    resp = await async_client.get(f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/timesheets", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["total"] == 1
    assert resp.json()["items"][0]["status"] == "draft"


async def test_approved_timesheets_accrue_sick_leave(async_client: AsyncClient) -> None:
    await _create_employee(async_client, start_date="2024-01-01")
    for status in ("approved", "submitted"):
        await async_client.put(
            f"{EMPLOYEES_URL}/{EMPLOYEE_ID}/timesheets/{uuid.uuid4()}",
            json=_timesheet_payload(status=status, hours=40),
            headers=AUTH_HEADERS,
        )

    resp = await async_client.get(BALANCES_URL, params={"as_of": "2024-03-01"}, headers=AUTH_HEADERS)
    sick_leave = next(item for item in resp.json()["items"] if item["leave_type"] == "sick_leave")
    assert sick_leave["accrued_hours"] == 1
    assert sick_leave["available_hours"] == 1
