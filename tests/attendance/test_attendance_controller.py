from __future__ import annotations

from datetime import datetime

import pytest

from hrms_backend.container import Container
from hrms_backend.main import create_app


@pytest.fixture
def app(directory, attendance_repo, service):
    container = Container(
        conn=None,
        users_repo=directory,
        attendance_repo=attendance_repo,
        attendance_service=service,
    )
    return create_app(settings_module="hrms_backend.config.testing", container=container)


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


def _login(client, user_id: int) -> None:
    with client.session_transaction() as sess:
        sess["user_id"] = user_id


def _create(client, **overrides):
    body = {"userId": 2, "date": "2026-02-02", "status": "present"}
    body.update(overrides)
    return client.post("/attendances", json=body)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_unknown_route_is_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "Route not found"}


def test_requires_authentication(client):
    resp = client.get("/attendances/1")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_session_for_missing_user_is_rejected(client):
    _login(client, 99)
    assert client.get("/attendances/1").status_code == 401


def test_inactive_account_is_forbidden(client):
    _login(client, 4)
    assert client.get("/attendances/1").status_code == 403


def test_create_returns_201_then_409(client):
    _login(client, 2)

    first = _create(client, clockIn="2026-02-02T09:00:00", clockOut="2026-02-02T17:30:00")
    assert first.status_code == 201
    body = first.get_json()
    assert body["success"] is True
    assert body["message"] == "Attendance marked successfully"
    assert body["data"]["totalHours"] == 8.5
    assert body["data"]["markedBy"] == 2

    second = _create(client)
    assert second.status_code == 409
    assert second.get_json() == {"success": False, "message": "Attendance already marked for this date"}


@pytest.mark.parametrize(
    "overrides",
    [
        {"status": "bogus"},
        {"status": None},
        {"date": None},
        {"date": "02/02/2026"},
        {"userId": "abc"},
        {"userId": 2.9},
        {"date": "2026-02-02garbage"},
        {"clockIn": "nine o'clock"},
    ],
)
def test_create_rejects_bad_input(client, overrides):
    _login(client, 2)
    resp = _create(client, **overrides)
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_create_for_unknown_user_is_404(client):
    _login(client, 1)
    resp = _create(client, userId=99)
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "User not found"


def test_list_is_admin_only(client):
    _login(client, 2)
    assert client.get("/attendances").status_code == 403


def test_admin_list_with_filters(client):
    _login(client, 1)
    _create(client, userId=2, date="2026-02-01", status="late")
    _create(client, userId=3, date="2026-02-02", status="present")

    resp = client.get("/attendances?status=late")
    assert resp.status_code == 200
    rows = resp.get_json()["data"]
    assert [r["userId"] for r in rows] == [2]
    assert rows[0]["user"]["empId"] == "EMP002"

    resp = client.get("/attendances?startDate=2026-02-02&endDate=2026-02-02")
    assert [r["userId"] for r in resp.get_json()["data"]] == [3]


def test_admin_list_rejects_invalid_status(client):
    _login(client, 1)
    resp = client.get("/attendances?status=bogus")
    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("Invalid status")


def test_owner_can_read_own_list_and_stats(client):
    _login(client, 2)
    _create(client, date="2026-02-02", status="present")
    _create(client, date="2026-02-03", status="late")

    resp = client.get("/attendances/user/2?startDate=2026-02-03")
    assert resp.status_code == 200
    assert [r["date"] for r in resp.get_json()["data"]] == ["2026-02-03"]

    stats = client.get("/attendances/user/2/stats").get_json()["data"]
    assert stats == {"userId": 2, "absent": 0, "present": 1, "on_leave": 0, "late": 1, "total": 2}


def test_other_users_attendance_is_forbidden(client):
    _login(client, 3)
    assert client.get("/attendances/user/2").status_code == 403
    assert client.get("/attendances/user/2/stats").status_code == 403


def test_admin_reading_unknown_user_is_404(client):
    _login(client, 1)
    assert client.get("/attendances/user/99").status_code == 404
    assert client.get("/attendances/user/99/stats").status_code == 404


def test_invalid_ids_are_400(client):
    _login(client, 1)
    assert client.get("/attendances/abc").status_code == 400
    assert client.get("/attendances/user/abc").status_code == 400
    assert client.delete("/attendances/0").status_code == 400


def test_get_by_id(client):
    _login(client, 2)
    created = _create(client).get_json()["data"]

    resp = client.get(f"/attendances/{created['id']}")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["id"] == created["id"]

    assert client.get("/attendances/999").status_code == 404


def test_patch_and_put_update_partially(client):
    _login(client, 1)
    created = _create(client, clockIn="2026-02-02T09:00:00").get_json()["data"]

    resp = client.patch(f"/attendances/{created['id']}", json={"clockOut": "2026-02-02T17:00:00"})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "present"
    assert data["totalHours"] == 8.0

    resp = client.put(f"/attendances/{created['id']}", json={"status": "late"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["clockOut"] == "2026-02-02T17:00:00"
    assert resp.get_json()["data"]["status"] == "late"


def test_patch_clock_out_now(client, monkeypatch, fixed_now):
    monkeypatch.setattr("hrms_backend.attendance.controller.now_utc", lambda: fixed_now)
    _login(client, 1)
    created = _create(client, clockIn="2026-02-02T07:00:00").get_json()["data"]

    resp = client.patch(f"/attendances/{created['id']}", json={"clockOut": "now"})

    data = resp.get_json()["data"]
    assert data["clockOut"] == fixed_now.isoformat()
    assert data["totalHours"] == 1.42


def test_patch_null_clears_clock_time(client):
    _login(client, 1)
    created = _create(client, clockIn="2026-02-02T09:00:00", clockOut="2026-02-02T17:00:00").get_json()["data"]

    resp = client.patch(f"/attendances/{created['id']}", json={"clockOut": None})

    assert resp.get_json()["data"]["clockOut"] is None
    assert resp.get_json()["data"]["totalHours"] is None


def test_patch_errors(client):
    _login(client, 1)
    first = _create(client, date="2026-02-02").get_json()["data"]
    _create(client, date="2026-02-03")

    assert client.patch(f"/attendances/{first['id']}", json={"status": "bogus"}).status_code == 400
    assert client.patch(f"/attendances/{first['id']}", json={"date": "2026-02-03"}).status_code == 409
    assert client.patch(f"/attendances/{first['id']}", json={"date": "2026-02-02"}).status_code == 200
    assert client.patch("/attendances/999", json={"status": "late"}).status_code == 404
    assert client.patch(f"/attendances/{first['id']}", json=["status"]).status_code == 400


def test_update_and_delete_are_admin_only(client):
    _login(client, 2)
    created = _create(client).get_json()["data"]

    assert client.patch(f"/attendances/{created['id']}", json={"status": "late"}).status_code == 403
    assert client.delete(f"/attendances/{created['id']}").status_code == 403


def test_delete_twice(client):
    _login(client, 1)
    created = _create(client).get_json()["data"]

    first = client.delete(f"/attendances/{created['id']}")
    assert first.status_code == 200
    assert first.get_json() == {"success": True, "message": "Attendance deleted successfully"}

    assert client.delete(f"/attendances/{created['id']}").status_code == 404


def test_unexpected_store_errors_do_not_leak(client, attendance_repo, monkeypatch):
    def broken(attendance_id):
        raise RuntimeError("Duplicate entry for key 'uq_attendances_user_date'")

    monkeypatch.setattr(attendance_repo, "get_by_id", broken)
    _login(client, 2)

    resp = client.get("/attendances/1")

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Failed to fetch attendance"}


def test_now_and_offset_timestamps_share_one_clock(client, monkeypatch):
    # 17:30 in UTC+05:30
    monkeypatch.setattr("hrms_backend.attendance.controller.now_utc", lambda: datetime(2026, 2, 2, 12, 0))
    _login(client, 2)

    created = _create(client, clockIn="2026-02-02T09:00:00+05:30", clockOut="now").get_json()["data"]

    assert created["clockIn"] == "2026-02-02T03:30:00"
    assert created["clockOut"] == "2026-02-02T12:00:00"
    assert created["totalHours"] == 8.5
