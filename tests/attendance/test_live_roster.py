from __future__ import annotations

import pytest

from src.geofence_attendance.geofence_attendance.core.exceptions import AuthorizationError, SessionNotFoundError
from tests.fakes import ANCHOR_LAT, ANCHOR_LON, OTHER_TEACHER_ID, STUDENT_ID, TEACHER_ID, build_world, make_student


def _open(world):
    return world.session_service.open(
        schedule_id=1, teacher_id=TEACHER_ID, anchor_lat=ANCHOR_LAT, anchor_lon=ANCHOR_LON
    )


def test_roster_is_ordered_by_mark_time():
    world = build_world()
    world.users.add_student(make_student(student_id=101, full_name="Bilal Khan", device_id="dev-B"))
    session = _open(world)

    world.attendance_service.mark(
        student_id=101, session_id=session.session_id, device_id="dev-B", latitude=ANCHOR_LAT, longitude=ANCHOR_LON
    )
    world.clock.advance(seconds=30)
    world.attendance_service.mark(
        student_id=STUDENT_ID, session_id=session.session_id, device_id="dev-A", latitude=ANCHOR_LAT, longitude=ANCHOR_LON
    )

    roster = world.attendance_service.live_roster(session_id=session.session_id, teacher_id=TEACHER_ID)

    assert [r.full_name for r in roster] == ["Bilal Khan", "Asha Rao"]
    assert roster[0].to_dict()["id"] == 101


def test_empty_roster():
    world = build_world()
    session = _open(world)

    assert list(world.attendance_service.live_roster(session_id=session.session_id, teacher_id=TEACHER_ID)) == []


def test_roster_only_for_owning_teacher():
    world = build_world()
    session = _open(world)

    with pytest.raises(AuthorizationError):
        world.attendance_service.live_roster(session_id=session.session_id, teacher_id=OTHER_TEACHER_ID)


def test_roster_for_unknown_session():
    world = build_world()

    with pytest.raises(SessionNotFoundError):
        world.attendance_service.live_roster(session_id=77, teacher_id=TEACHER_ID)
