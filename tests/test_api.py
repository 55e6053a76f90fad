"""
End-to-end tests through the HTTP surface.
"""
from datetime import date, timedelta
from uuid import uuid4

import pytest

from timeclock.models.shift import ShiftStatus
from timeclock.services.time_calculations import utcnow


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


@pytest.mark.asyncio
async def test_kiosk_clock_in_and_out(client, db, employee, make_shift):
    now = utcnow()
    shift = await make_shift(employee, now - timedelta(hours=1), now + timedelta(hours=7))

    response = await client.post("/api/v1/clock/in", json={"pin": "2580", "tablet_id": "kiosk-1"})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Clocked in successfully"
    assert body["user_name"] == "Erin Employee"
    assert body["entry"]["shift_id"] == str(shift.id)
    assert body["entry"]["clock_out_time"] is None

    response = await client.post("/api/v1/clock/in", json={"pin": "2580", "tablet_id": "kiosk-1"})
    assert response.status_code == 409
    assert response.json()["kind"] == "conflict"

    response = await client.post("/api/v1/clock/out", json={"pin": "2580"})
    assert response.status_code == 200
    assert response.json()["message"] == "Clocked out successfully"
    assert response.json()["entry"]["total_hours"] is not None

    await db.refresh(shift)
    assert shift.status == ShiftStatus.COMPLETED


@pytest.mark.asyncio
async def test_kiosk_rejects_unknown_pin(client, employee):
    response = await client.post("/api/v1/clock/in", json={"pin": "9999", "tablet_id": "kiosk-1"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid PIN or inactive account", "kind": "unauthorized"}


@pytest.mark.asyncio
async def test_kiosk_requires_pin(client):
    response = await client.post("/api/v1/clock/in", json={"tablet_id": "kiosk-1"})
    assert response.status_code == 400
    assert response.json()["kind"] == "validation"


@pytest.mark.asyncio
async def test_bearer_token_required(client):
    response = await client.get("/api/v1/shifts")
    assert response.status_code == 401
    assert response.json()["kind"] == "unauthorized"

    response = await client.get("/api/v1/shifts", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_employee_cannot_schedule(client, employee, headers_for):
    now = utcnow()
    response = await client.post(
        "/api/v1/shifts",
        json={
            "user_id": str(employee.id),
            "start_time": now.isoformat(),
            "end_time": (now + timedelta(hours=8)).isoformat(),
        },
        headers=headers_for(employee),
    )
    assert response.status_code == 403
    assert response.json()["kind"] == "unauthorized"


@pytest.mark.asyncio
async def test_manager_schedules_shifts(client, employee, manager, headers_for):
    start = utcnow().replace(microsecond=0) + timedelta(days=1)
    payload = {
        "user_id": str(employee.id),
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=8)).isoformat(),
        "position": "Cashier",
    }

    response = await client.post("/api/v1/shifts", json=payload, headers=headers_for(manager))
    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "SCHEDULED"
    assert created["position"] == "Cashier"

    response = await client.post("/api/v1/shifts", json=payload, headers=headers_for(manager))
    assert response.status_code == 400
    assert response.json() == {"detail": "Shift overlaps with existing shift", "kind": "validation"}

    response = await client.get(f"/api/v1/shifts/{created['id']}", headers=headers_for(employee))
    assert response.status_code == 200

    response = await client.get("/api/v1/shifts/upcoming", headers=headers_for(employee))
    assert [s["id"] for s in response.json()] == [created["id"]]

    response = await client.delete(f"/api/v1/shifts/{created['id']}", headers=headers_for(manager))
    assert response.status_code == 200
    assert response.json() == {"message": "Shift deleted successfully"}


@pytest.mark.asyncio
async def test_request_body_and_path_validation(client, manager, headers_for):
    response = await client.post("/api/v1/shifts", json={"user_id": "x"}, headers=headers_for(manager))
    assert response.status_code == 422
    assert response.json()["kind"] == "validation"

    response = await client.get("/api/v1/shifts/not-a-uuid", headers=headers_for(manager))
    assert response.status_code == 400
    assert response.json()["kind"] == "validation"

    response = await client.get(f"/api/v1/shifts/{uuid4()}", headers=headers_for(manager))
    assert response.status_code == 404
    assert response.json() == {"detail": "Shift not found", "kind": "not_found"}


@pytest.mark.asyncio
async def test_bulk_shift_endpoint(client, db, employee, manager, headers_for):
    start = utcnow().replace(microsecond=0) + timedelta(days=2)
    shifts = [
        {
            "user_id": str(employee.id),
            "start_time": (start + timedelta(days=i)).isoformat(),
            "end_time": (start + timedelta(days=i, hours=8)).isoformat(),
        }
        for i in range(3)
    ]

    response = await client.post("/api/v1/shifts/bulk", json={"shifts": shifts}, headers=headers_for(manager))
    assert response.status_code == 201
    assert response.json()["created"] == 3

    response = await client.post(
        "/api/v1/shifts/bulk", json={"shifts": shifts[:1]}, headers=headers_for(manager)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Shift 1: Shift overlaps with existing shift"


@pytest.mark.asyncio
async def test_time_off_flow(client, employee, manager, headers_for):
    response = await client.post(
        "/api/v1/time-off-requests",
        json={
            "start_date": date(2030, 6, 10).isoformat(),
            "end_date": date(2030, 6, 12).isoformat(),
            "type": "VACATION",
        },
        headers=headers_for(employee),
    )
    assert response.status_code == 201
    request_id = response.json()["id"]

    response = await client.get("/api/v1/time-off-requests/pending", headers=headers_for(employee))
    assert response.status_code == 403

    response = await client.get("/api/v1/notifications/my", headers=headers_for(manager))
    assert [n["message"] for n in response.json()] == ["New time-off request from employee@test.com"]

    response = await client.put(
        f"/api/v1/time-off-requests/{request_id}/deny",
        json={"manager_notes": "Inventory week"},
        headers=headers_for(manager),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "DENIED"

    response = await client.put(f"/api/v1/time-off-requests/{request_id}/approve", headers=headers_for(manager))
    assert response.status_code == 400
    assert response.json()["detail"] == "Request has already been reviewed"

    response = await client.get("/api/v1/notifications/my?unread_only=true", headers=headers_for(employee))
    notifications = response.json()
    assert [n["message"] for n in notifications] == ["Your time-off request has been denied: Inventory week"]

    response = await client.put(
        f"/api/v1/notifications/{notifications[0]['id']}/read", headers=headers_for(employee)
    )
    assert response.json()["read"] is True

    response = await client.get("/api/v1/notifications/my?unread_only=true", headers=headers_for(employee))
    assert response.json() == []


@pytest.mark.asyncio
async def test_users_endpoints(client, employee, manager, admin, headers_for):
    response = await client.get("/api/v1/users/me", headers=headers_for(employee))
    assert response.status_code == 200
    assert response.json()["has_pin"] is True
    assert "pin_digest" not in response.json()

    response = await client.put("/api/v1/users/me/pin", json={"pin": "7391"}, headers=headers_for(employee))
    assert response.json() == {"message": "PIN updated successfully"}

    payload = {"email": "new@test.com", "first_name": "New", "last_name": "Person"}
    response = await client.post("/api/v1/users", json=payload, headers=headers_for(manager))
    assert response.status_code == 403

    response = await client.post("/api/v1/users", json=payload, headers=headers_for(admin))
    assert response.status_code == 201
    assert response.json()["has_pin"] is False


@pytest.mark.asyncio
async def test_reports_endpoints(client, manager, employee, headers_for):
    response = await client.get("/api/v1/reports/dashboard-stats", headers=headers_for(manager))
    assert response.status_code == 200
    assert response.json()["active_employees"] == 1

    response = await client.get("/api/v1/reports/weekly-hours", headers=headers_for(manager))
    assert response.status_code == 200
    assert response.json()["employees"] == []

    response = await client.get("/api/v1/reports/labor-cost", headers=headers_for(manager))
    assert response.status_code == 400

    response = await client.get(f"/api/v1/reports/employee/{employee.id}/history", headers=headers_for(manager))
    assert response.status_code == 200
    assert response.json()["name"] == "Erin Employee"

    response = await client.get("/api/v1/reports/dashboard-stats", headers=headers_for(employee))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_framework_errors_use_error_kinds(client):
    response = await client.get("/api/v1/no-such-route")
    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"

    response = await client.delete("/api/v1/health")
    assert response.status_code == 405
    assert response.json()["kind"] == "validation"
