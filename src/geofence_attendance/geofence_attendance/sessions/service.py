from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock
from ..common.validators import require_latitude, require_longitude
from ..core.constants import DEFAULT_RADIUS_METERS, DEFAULT_SESSION_DURATION_MINUTES
from ..core.exceptions import (
    AuthorizationError,
    NoClassTodayError,
    NotEnrolledError,
    OutsideClassWindowError,
    SessionNotFoundError,
)
from ..eligibility import EligibilityResolver
from ..schedules.model import ScheduledClass
from ..schedules.repository import ScheduleRepository
from ..users.model import StudentProfile
from ..users.repository import UserRepository
from .model import AttendanceSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionView:
    """Session plus its class, as shown to a student."""

    session: AttendanceSession
    schedule: ScheduledClass
    is_live: bool
    has_marked: Optional[bool] = None

    def to_dict(self) -> dict:
        out = self.session.to_dict()
        out["is_live"] = self.is_live
        out["schedule"] = self.schedule.summary()
        if self.has_marked is not None:
            out["has_marked"] = self.has_marked
        return out


@dataclass(frozen=True)
class TeacherSessionRow:
    session: AttendanceSession
    schedule: Optional[ScheduledClass]
    is_live: bool
    present_count: int

    def to_dict(self) -> dict:
        out = self.session.to_dict()
        out["is_live"] = self.is_live
        out["present_count"] = self.present_count
        out["schedule"] = self.schedule.summary() if self.schedule else None
        return out


@dataclass(frozen=True)
class TodayClassStatus:
    schedule: ScheduledClass
    sessions_today: int
    live_session_id: Optional[int]

    def to_dict(self) -> dict:
        return {
            "schedule": self.schedule.summary(),
            "opened_today": self.sessions_today > 0,
            "sessions_today": self.sessions_today,
            "live_session_id": self.live_session_id,
        }


class SessionService:
    """Use case: open, close and look up attendance sessions.

    Liveness is always computed from the clock (``is_live``), never from the
    stored ``is_active`` flag alone. Expiry needs no background job.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        schedules: ScheduleRepository,
        users: UserRepository,
        marks: AttendanceRepository,
        *,
        clock: Optional[Clock] = None,
        resolver: Optional[EligibilityResolver] = None,
        duration_minutes: int = DEFAULT_SESSION_DURATION_MINUTES,
        radius_meters: float = DEFAULT_RADIUS_METERS,
    ):
        self._sessions = sessions
        self._schedules = schedules
        self._users = users
        self._marks = marks
        self._clock = clock or Clock()
        self._resolver = resolver or EligibilityResolver()
        self._duration = timedelta(minutes=int(duration_minutes))
        self._radius_meters = float(radius_meters)

    def is_live(self, session: AttendanceSession) -> bool:
        return session.is_live_at(self._clock.now())

    def _owned_schedule(self, schedule_id: int, teacher_id: int) -> ScheduledClass:
        schedule = self._schedules.get_by_id(schedule_id)
        if not schedule or not schedule.is_active or int(schedule.teacher_id) != int(teacher_id):
            raise AuthorizationError("You are not assigned to this class schedule")
        return schedule

    def open(self, *, schedule_id: int, teacher_id: int, anchor_lat, anchor_lon) -> AttendanceSession:
        anchor_lat = require_latitude(anchor_lat)
        anchor_lon = require_longitude(anchor_lon)

        schedule = self._owned_schedule(schedule_id, teacher_id)

        now = self._clock.now()
        if not schedule.recurs_on(self._clock.weekday(now)):
            raise NoClassTodayError("No class scheduled for today")
        if not schedule.covers_minute(self._clock.minutes_since_midnight(now)):
            raise OutsideClassWindowError("Attendance can only be started during class time")

        session, superseded = self._sessions.open_superseding(
            schedule_id=schedule.schedule_id,
            anchor_lat=anchor_lat,
            anchor_lon=anchor_lon,
            radius_meters=self._radius_meters,
            start_time=now,
            end_time=now + self._duration,
        )
        if superseded:
            logger.info("schedule %s: superseded %d active session(s)", schedule.schedule_id, superseded)
        logger.info(
            "session %s opened for schedule %s by teacher %s until %s",
            session.session_id,
            schedule.schedule_id,
            teacher_id,
            session.end_time.isoformat(),
        )
        return session

    def close(self, *, session_id: int, teacher_id: int) -> AttendanceSession:
        """Idempotent: closing a closed session is a silent no-op."""
        session = self._sessions.get_by_id(session_id)
        schedule = self._schedules.get_by_id(session.schedule_id) if session else None
        if not session or not schedule or int(schedule.teacher_id) != int(teacher_id):
            raise AuthorizationError("Not authorized for this attendance session")

        if self._sessions.close(session.session_id):
            logger.info("session %s closed by teacher %s", session.session_id, teacher_id)
        return self._sessions.get_by_id(session.session_id) or session

    def _student(self, student_id: int) -> StudentProfile:
        profile = self._users.get_student_profile(student_id)
        if not profile:
            raise AuthorizationError("Only students can access attendance sessions")
        return profile

    def find_active_for_student(self, student_id: int) -> SessionView:
        """The live session the student may mark.

        With several eligible live sessions the most recently opened wins.
        """
        student = self._student(student_id)
        now = self._clock.now()

        schedules: Dict[int, Optional[ScheduledClass]] = {}
        matches: List[SessionView] = []
        for session in self._sessions.list_live(now):
            if not session.is_live_at(now):
                continue
            if session.schedule_id not in schedules:
                schedules[session.schedule_id] = self._schedules.get_by_id(session.schedule_id)
            schedule = schedules[session.schedule_id]
            if schedule and self._resolver.is_eligible(student, schedule):
                matches.append(SessionView(session=session, schedule=schedule, is_live=True))

        if not matches:
            raise SessionNotFoundError("No active attendance session found")

        matches.sort(key=lambda v: (v.session.start_time, v.session.session_id), reverse=True)
        if len(matches) > 1:
            logger.warning(
                "student %s is eligible for %d live sessions %s; using the most recent",
                student_id,
                len(matches),
                [v.session.session_id for v in matches],
            )
        return matches[0]

    def get_detail_for_student(self, *, session_id: int, student_id: int) -> SessionView:
        student = self._student(student_id)
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise SessionNotFoundError("Session not found")
        schedule = self._schedules.get_by_id(session.schedule_id)
        if not schedule:
            raise SessionNotFoundError("Session not found")

        decision = self._resolver.evaluate(student, schedule)
        if not decision.eligible:
            raise NotEnrolledError("You are not enrolled in this class", reason=decision.failure)

        return SessionView(
            session=session,
            schedule=schedule,
            is_live=self.is_live(session),
            has_marked=self._marks.has_mark(student_id=student.student_id, session_id=session.session_id),
        )

    def list_for_teacher_on(self, *, teacher_id: int, day: Optional[date] = None) -> List[TeacherSessionRow]:
        """Sessions the teacher opened on a civil day, newest first."""
        day = day or self._clock.today()
        start, end = self._clock.day_bounds(day)
        sessions = list(self._sessions.list_for_teacher(teacher_id, start=start, end=end))
        counts = self._marks.count_by_session(s.session_id for s in sessions)

        now = self._clock.now()
        schedules: Dict[int, Optional[ScheduledClass]] = {}
        rows: List[TeacherSessionRow] = []
        for s in sessions:
            if s.schedule_id not in schedules:
                schedules[s.schedule_id] = self._schedules.get_by_id(s.schedule_id)
            rows.append(
                TeacherSessionRow(
                    session=s,
                    schedule=schedules[s.schedule_id],
                    is_live=s.is_live_at(now),
                    present_count=counts.get(s.session_id, 0),
                )
            )
        return rows

    def check_today(self, *, teacher_id: int) -> List[TodayClassStatus]:
        """For each of the teacher's classes recurring today: opened yet, live now."""
        now = self._clock.now()
        weekday = self._clock.weekday(now)
        start, end = self._clock.day_bounds(now.date())
        todays = list(self._sessions.list_for_teacher(teacher_id, start=start, end=end))

        out: List[TodayClassStatus] = []
        for schedule in self._schedules.list_for_teacher(teacher_id):
            if not schedule.recurs_on(weekday):
                continue
            mine = [s for s in todays if s.schedule_id == schedule.schedule_id]
            live = next((s for s in mine if s.is_live_at(now)), None)
            out.append(
                TodayClassStatus(
                    schedule=schedule,
                    sessions_today=len(mine),
                    live_session_id=live.session_id if live else None,
                )
            )
        return out
