from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.geofence_attendance.geofence_attendance.core.enums import Weekday
from src.geofence_attendance.geofence_attendance.core.exceptions import (
    AuthorizationError,
    NotEnrolledError,
    SessionNotFoundError,
)
from tests.fakes import ANCHOR_LAT, ANCHOR_LON, STUDENT_ID, TEACHER_ID, build_world, make_schedule


def _open(world, schedule_id=1):
    return world.session_service.open(
        schedule_id=schedule_id, teacher_id=TEACHER_ID, anchor_lat=ANCHOR_LAT, anchor_lon=ANCHOR_LON
    )


def _mark(world, session_id):
    return world.attendance_service.mark(
        student_id=STUDENT_ID, session_id=session_id, device_id="dev-A", latitude=ANCHOR_LAT, longitude=ANCHOR_LON
    )


def test_no_active_session():
    world = build_world()

    with pytest.raises(SessionNotFoundError):
        world.session_service.find_active_for_student(STUDENT_ID)


def test_active_session_for_eligible_student():
    world = build_world()
    session = _open(world)

    view = world.session_service.find_active_for_student(STUDENT_ID)

    assert view.session.session_id == session.session_id
    assert view.is_live
    assert view.to_dict()["schedule"]["subject_name"] == "Data Structures"


def test_sessions_for_other_sections_are_invisible():
    world = build_world()
    world.schedules.add(make_schedule(schedule_id=2, section="B"))
    _open(world, schedule_id=2)

    with pytest.raises(SessionNotFoundError):
        world.session_service.find_active_for_student(STUDENT_ID)


def test_expired_session_is_not_active():
    world = build_world()
    _open(world)

    world.clock.advance(minutes=6)

    with pytest.raises(SessionNotFoundError):
        world.session_service.find_active_for_student(STUDENT_ID)


def test_most_recent_of_several_eligible_sessions_wins():
    world = build_world()
    world.schedules.add(make_schedule(schedule_id=2, subject_name="Algorithms"))
    _open(world, schedule_id=1)
    world.clock.advance(minutes=1)
    latest = _open(world, schedule_id=2)

    view = world.session_service.find_active_for_student(STUDENT_ID)

    assert view.session.session_id == latest.session_id


def test_non_student_cannot_look_up_sessions():
    world = build_world()
    _open(world)

    with pytest.raises(AuthorizationError):
        world.session_service.find_active_for_student(TEACHER_ID)


def test_detail_reports_has_marked():
    world = build_world()
    session = _open(world)

    before = world.session_service.get_detail_for_student(session_id=session.session_id, student_id=STUDENT_ID)
    _mark(world, session.session_id)
    after = world.session_service.get_detail_for_student(session_id=session.session_id, student_id=STUDENT_ID)

    assert before.has_marked is False
    assert after.has_marked is True
    assert after.to_dict()["has_marked"] is True


def test_detail_rejects_other_audience_and_unknown_session():
    world = build_world()
    world.schedules.add(make_schedule(schedule_id=2, dept_id=99))
    foreign = _open(world, schedule_id=2)

    with pytest.raises(NotEnrolledError):
        world.session_service.get_detail_for_student(session_id=foreign.session_id, student_id=STUDENT_ID)
    with pytest.raises(SessionNotFoundError):
        world.session_service.get_detail_for_student(session_id=999, student_id=STUDENT_ID)


def test_teacher_sessions_for_a_day_with_present_counts():
    world = build_world()
    first = _open(world)
    _mark(world, first.session_id)
    world.clock.advance(minutes=10)
    second = _open(world)

    rows = world.session_service.list_for_teacher_on(teacher_id=TEACHER_ID, day=date(2026, 10, 19))

    assert [r.session.session_id for r in rows] == [second.session_id, first.session_id]
    assert [r.present_count for r in rows] == [0, 1]
    assert [r.is_live for r in rows] == [True, False]
    assert world.session_service.list_for_teacher_on(teacher_id=TEACHER_ID, day=date(2026, 10, 18)) == []


def test_check_today_lists_classes_recurring_today():
    world = build_world()
    world.schedules.add(make_schedule(schedule_id=2, days=frozenset({Weekday.TUE}), start_time=time(9, 0)))
    world.schedules.add(make_schedule(schedule_id=3, start_time=time(14, 0), end_time=time(15, 0)))
    session = _open(world, schedule_id=1)

    statuses = {s.schedule.schedule_id: s for s in world.session_service.check_today(teacher_id=TEACHER_ID)}

    assert set(statuses) == {1, 3}
    assert statuses[1].live_session_id == session.session_id
    assert statuses[1].to_dict()["opened_today"] is True
    assert statuses[3].sessions_today == 0 and statuses[3].live_session_id is None


def test_check_today_uses_civil_timezone():
    # 2026-10-18 20:00 UTC is already Monday 01:30 in Asia/Kolkata.
    from datetime import timezone

    world = build_world(now=datetime(2026, 10, 18, 20, 0, tzinfo=timezone.utc))

    statuses = world.session_service.check_today(teacher_id=TEACHER_ID)

    assert [s.schedule.schedule_id for s in statuses] == [1]
