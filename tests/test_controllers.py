from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from src.geofence_attendance.geofence_attendance.container import Container
from src.geofence_attendance.geofence_attendance.core.enums import Role
from src.geofence_attendance.geofence_attendance.main import create_app
from src.geofence_attendance.geofence_attendance.users.model import User
from src.geofence_attendance.geofence_attendance.users.service import AuthService
from tests.fakes import ANCHOR_LAT, ANCHOR_LON, DEPT_ID, STUDENT_ID, TEACHER_ID, build_world


@pytest.fixture
def world():
    return build_world()


@pytest.fixture
def client(monkeypatch, world):
    monkeypatch.setenv("APP_ENV", "testing")
    container = Container(
        conn=None,
        clock=world.clock,
        users_repo=world.users,
        schedules_repo=world.schedules,
        sessions_repo=world.sessions,
        attendance_repo=world.marks,
        auth_service=AuthService(world.users),
        session_service=world.session_service,
        attendance_service=world.attendance_service,
    )
    app = create_app(container)
    return app.test_client()


def _login_as(client, user_id, role: Role):
    with client.session_transaction() as s:
        s["user_id"] = user_id
        s["role"] = role.value


def _start(client):
    return client.post(
        "/api/attendance/start",
        json={"classScheduleId": 1, "latitude": ANCHOR_LAT, "longitude": ANCHOR_LON},
    )


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_login_sets_session(client, world):
    world.users.add_account(
        User(
            user_id=STUDENT_ID,
            full_name="Asha Rao",
            username="asha",
            password_hash=generate_password_hash("s3cret"),
            role=Role.STUDENT,
            dept_id=DEPT_ID,
        )
    )

    bad = client.post("/api/auth/login", json={"username": "asha", "password": "nope"})
    ok = client.post("/api/auth/login", json={"username": "asha", "password": "s3cret"})

    assert bad.status_code == 401
    assert ok.status_code == 200
    assert ok.get_json()["user"]["role"] == "student"
    assert client.get("/api/auth/me").get_json()["user"]["id"] == STUDENT_ID


def test_requires_login(client):
    res = _start(client)

    assert res.status_code == 401
    assert res.get_json()["code"] == "NOT_AUTHENTICATED"


def test_student_cannot_start_session(client):
    _login_as(client, STUDENT_ID, Role.STUDENT)

    res = _start(client)

    assert res.status_code == 403
    assert res.get_json()["code"] == "NOT_AUTHORIZED"


def test_teacher_starts_and_closes_session(client):
    _login_as(client, TEACHER_ID, Role.TEACHER)

    started = _start(client)
    session_id = started.get_json()["session"]["id"]
    closed = client.post(f"/api/attendance/close/{session_id}")

    assert started.status_code == 201
    assert closed.status_code == 200
    assert closed.get_json()["session"]["is_locked"] is True


def test_start_without_schedule_is_validation_error(client):
    _login_as(client, TEACHER_ID, Role.TEACHER)

    res = client.post("/api/attendance/start", json={"latitude": ANCHOR_LAT, "longitude": ANCHOR_LON})

    assert res.status_code == 400
    assert res.get_json()["code"] == "VALIDATION_ERROR"


def test_mark_flow_and_live_roster(client):
    _login_as(client, TEACHER_ID, Role.TEACHER)
    session_id = _start(client).get_json()["session"]["id"]

    _login_as(client, STUDENT_ID, Role.STUDENT)
    active = client.get("/api/attendance/active")
    marked = client.post(
        "/api/attendance/mark",
        json={"sessionId": session_id, "deviceId": "dev-A", "latitude": ANCHOR_LAT, "longitude": ANCHOR_LON},
    )
    again = client.post(
        "/api/attendance/mark",
        json={"sessionId": session_id, "deviceId": "dev-A", "latitude": ANCHOR_LAT, "longitude": ANCHOR_LON},
    )

    _login_as(client, TEACHER_ID, Role.TEACHER)
    live = client.get(f"/api/attendance/live/{session_id}")

    assert active.get_json()["session"]["id"] == session_id
    assert marked.status_code == 200
    assert again.status_code == 409
    assert again.get_json()["code"] == "ALREADY_MARKED"
    assert live.get_json()["count"] == 1
    assert live.get_json()["students"][0]["name"] == "Asha Rao"


def test_out_of_range_body(client):
    _login_as(client, TEACHER_ID, Role.TEACHER)
    session_id = _start(client).get_json()["session"]["id"]

    _login_as(client, STUDENT_ID, Role.STUDENT)
    res = client.post(
        "/api/attendance/mark",
        json={"sessionId": session_id, "deviceId": "dev-A", "latitude": ANCHOR_LAT + 0.000405, "longitude": ANCHOR_LON},
    )

    body = res.get_json()
    assert res.status_code == 403
    assert body["code"] == "OUT_OF_RANGE"
    assert body["distance"] == pytest.approx(45, abs=1)
    assert body["maxDistance"] == 30.0


def test_mark_without_session_id(client):
    _login_as(client, STUDENT_ID, Role.STUDENT)

    res = client.post("/api/attendance/mark", json={"deviceId": "dev-A", "latitude": 1, "longitude": 1})

    assert res.status_code == 400
    assert res.get_json()["code"] == "VALIDATION_ERROR"


def test_completed_sessions_rejects_bad_date(client):
    _login_as(client, TEACHER_ID, Role.TEACHER)

    assert client.get("/api/attendance/completed-sessions?date=19-10-2026").status_code == 400
    assert client.get("/api/attendance/completed-sessions?date=2026-10-19").get_json()["count"] == 0
