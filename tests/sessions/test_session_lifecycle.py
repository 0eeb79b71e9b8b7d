from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, time, timedelta

import pytest

from src.geofence_attendance.geofence_attendance.core.enums import Weekday
from src.geofence_attendance.geofence_attendance.core.exceptions import (
    AuthorizationError,
    NoClassTodayError,
    OutsideClassWindowError,
    ValidationError,
)
from tests.fakes import (
    ANCHOR_LAT,
    ANCHOR_LON,
    OTHER_TEACHER_ID,
    TEACHER_ID,
    build_world,
    make_schedule,
)


def _open(world, **overrides):
    kwargs = dict(schedule_id=1, teacher_id=TEACHER_ID, anchor_lat=ANCHOR_LAT, anchor_lon=ANCHOR_LON)
    kwargs.update(overrides)
    return world.session_service.open(**kwargs)


def test_open_during_class_sets_five_minute_window():
    world = build_world(now=datetime(2026, 10, 19, 10, 30))

    session = _open(world)

    assert session.is_active and not session.is_locked
    assert session.end_time - session.start_time == timedelta(minutes=5)
    assert world.clock.local(session.end_time).strftime("%a %H:%M") == "Mon 10:35"
    assert session.radius_meters == 30.0
    assert (session.anchor_lat, session.anchor_lon) == (ANCHOR_LAT, ANCHOR_LON)
    assert world.session_service.is_live(session)


@pytest.mark.parametrize("hh, mm", [(10, 0), (11, 0)])
def test_open_succeeds_on_window_edges(hh, mm):
    world = build_world(now=datetime(2026, 10, 19, hh, mm))

    assert _open(world).is_active


@pytest.mark.parametrize("hh, mm", [(9, 59), (11, 1)])
def test_open_fails_one_minute_outside_window(hh, mm):
    world = build_world(now=datetime(2026, 10, 19, hh, mm))

    with pytest.raises(OutsideClassWindowError):
        _open(world)
    assert world.sessions.all() == []


def test_open_on_a_day_without_class():
    world = build_world(now=datetime(2026, 10, 20, 10, 30))  # Tuesday

    with pytest.raises(NoClassTodayError):
        _open(world)


def test_open_checks_ownership_before_day():
    world = build_world(now=datetime(2026, 10, 20, 10, 30))

    with pytest.raises(AuthorizationError):
        _open(world, teacher_id=OTHER_TEACHER_ID)


def test_open_rejects_inactive_or_unknown_schedule():
    world = build_world()
    world.schedules.add(make_schedule(schedule_id=2, is_active=False))

    with pytest.raises(AuthorizationError):
        _open(world, schedule_id=2)
    with pytest.raises(AuthorizationError):
        _open(world, schedule_id=404)


def test_open_validates_anchor():
    world = build_world()

    with pytest.raises(ValidationError):
        _open(world, anchor_lat=None)
    with pytest.raises(ValidationError):
        _open(world, anchor_lon=250)


def test_new_session_supersedes_live_one():
    world = build_world()
    first = _open(world)

    world.clock.advance(minutes=2)
    second = _open(world)

    old = world.sessions.get_by_id(first.session_id)
    assert old.is_active is False and old.is_locked is True
    assert second.session_id != first.session_id
    live = [s for s in world.sessions.all() if world.session_service.is_live(s)]
    assert [s.session_id for s in live] == [second.session_id]


def test_supersession_also_locks_expired_but_unflipped_session():
    world = build_world()
    first = _open(world)

    world.clock.advance(minutes=10)
    _open(world)

    assert world.sessions.get_by_id(first.session_id).is_closed


def test_concurrent_opens_leave_one_live_session():
    world = build_world()

    with ThreadPoolExecutor(max_workers=10) as pool:
        results = list(pool.map(lambda _: _open(world), range(10)))

    assert len({s.session_id for s in results}) == 10
    live = [s for s in world.sessions.all() if world.session_service.is_live(s)]
    assert len(live) == 1


def test_liveness_is_computed_from_end_time():
    world = build_world()
    session = _open(world)

    world.clock.set(session.end_time)
    assert world.session_service.is_live(session)

    world.clock.advance(seconds=1)
    assert session.is_active  # flag untouched, still not live
    assert not world.session_service.is_live(session)


def test_close_is_idempotent():
    world = build_world()
    session = _open(world)

    first = world.session_service.close(session_id=session.session_id, teacher_id=TEACHER_ID)
    second = world.session_service.close(session_id=session.session_id, teacher_id=TEACHER_ID)

    assert (first.is_active, first.is_locked) == (False, True)
    assert (second.is_active, second.is_locked) == (False, True)
    assert not world.session_service.is_live(second)


def test_close_requires_owner():
    world = build_world()
    session = _open(world)

    with pytest.raises(AuthorizationError):
        world.session_service.close(session_id=session.session_id, teacher_id=OTHER_TEACHER_ID)
    with pytest.raises(AuthorizationError):
        world.session_service.close(session_id=999, teacher_id=TEACHER_ID)
    assert world.session_service.is_live(world.sessions.get_by_id(session.session_id))


def test_other_schedules_are_not_superseded():
    world = build_world()
    world.schedules.add(make_schedule(schedule_id=2, days=frozenset({Weekday.MON}), start_time=time(10, 0)))

    a = _open(world, schedule_id=1)
    b = _open(world, schedule_id=2)

    assert world.session_service.is_live(world.sessions.get_by_id(a.session_id))
    assert world.session_service.is_live(world.sessions.get_by_id(b.session_id))
