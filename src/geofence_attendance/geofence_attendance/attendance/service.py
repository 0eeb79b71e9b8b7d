from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.datetime_utils import Clock
from ..common.geo import haversine_distance
from ..common.validators import require_latitude, require_longitude, require_non_empty
from ..core.enums import EligibilityFailure
from ..core.exceptions import (
    AlreadyMarkedError,
    AuthorizationError,
    DeviceMismatchError,
    DuplicateMarkError,
    NotEnrolledError,
    OutOfRangeError,
    SessionExpiredError,
    SessionNotFoundError,
)
from ..eligibility import EligibilityResolver
from ..schedules.repository import ScheduleRepository
from ..sessions.repository import SessionRepository
from ..users.repository import UserRepository
from .model import AttendanceMark, RosterEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_NOT_ENROLLED_MESSAGES = {
    EligibilityFailure.DEPARTMENT: "You are not enrolled in this department",
    EligibilityFailure.SEMESTER: "You are not enrolled in this semester",
    EligibilityFailure.SECTION: "You are not enrolled in this section",
}


class AttendanceService:
    """Use case: a student marks presence; a teacher watches the roster."""

    def __init__(
        self,
        marks: AttendanceRepository,
        sessions: SessionRepository,
        schedules: ScheduleRepository,
        users: UserRepository,
        *,
        clock: Optional[Clock] = None,
        resolver: Optional[EligibilityResolver] = None,
    ):
        self._marks = marks
        self._sessions = sessions
        self._schedules = schedules
        self._users = users
        self._clock = clock or Clock()
        self._resolver = resolver or EligibilityResolver()

    def mark(self, *, student_id: int, session_id: int, device_id, latitude, longitude) -> AttendanceMark:
        """Run every check in order; nothing is written unless all pass."""
        require_non_empty(device_id, "deviceId")
        device_id = str(device_id)
        latitude = require_latitude(latitude)
        longitude = require_longitude(longitude)

        session = self._sessions.get_by_id(session_id)
        if not session:
            self._reject(student_id, session_id, "SESSION_NOT_FOUND")
            raise SessionNotFoundError("Attendance session not found")

        now = self._clock.now()
        if not session.is_live_at(now):
            self._reject(student_id, session_id, "SESSION_EXPIRED")
            raise SessionExpiredError("Attendance is closed for this session")

        student = self._users.get_student_profile(student_id)
        if not student:
            self._reject(student_id, session_id, "NOT_AUTHORIZED")
            raise AuthorizationError("Only students can mark attendance")

        schedule = self._schedules.get_by_id(session.schedule_id)
        if not schedule:
            self._reject(student_id, session_id, "SESSION_NOT_FOUND")
            raise SessionNotFoundError("Attendance session not found")

        decision = self._resolver.evaluate(student, schedule)
        if not decision.eligible:
            self._reject(student_id, session_id, f"NOT_ENROLLED/{decision.failure.value}")
            raise NotEnrolledError(_NOT_ENROLLED_MESSAGES[decision.failure], reason=decision.failure)

        # Exact string match, no normalisation and no implicit binding.
        if student.device_id is None or student.device_id != device_id:
            self._reject(student_id, session_id, "DEVICE_MISMATCH")
            raise DeviceMismatchError("This device is not registered to your account")

        distance = haversine_distance(latitude, longitude, session.anchor_lat, session.anchor_lon)
        if distance > session.radius_meters:
            self._reject(student_id, session_id, f"OUT_OF_RANGE ({distance:.1f}m > {session.radius_meters}m)")
            raise OutOfRangeError(distance_meters=distance, max_distance_meters=session.radius_meters)

        if self._marks.has_mark(student_id=student.student_id, session_id=session.session_id):
            self._reject(student_id, session_id, "ALREADY_MARKED")
            raise AlreadyMarkedError("Attendance already marked")

        try:
            mark = self._marks.create_mark(
                session_id=session.session_id,
                student_id=student.student_id,
                device_id=device_id,
                latitude=latitude,
                longitude=longitude,
                marked_at=now,
            )
        except DuplicateMarkError:
            logger.warning("student %s lost a duplicate-mark race on session %s", student_id, session_id)
            raise
        except SessionExpiredError:
            self._reject(student_id, session_id, "SESSION_EXPIRED (closed before insert)")
            raise

        logger.info("student %s marked present in session %s (%.1fm)", student_id, session_id, distance)

        try:
            self._users.set_current_session(student.student_id, session.session_id)
        except Exception:
            # Cached pointer only; the mark above is already committed.
            logger.exception("could not refresh current session for student %s", student_id)

        return mark

    def live_roster(self, *, session_id: int, teacher_id: int) -> Sequence[RosterEntry]:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise SessionNotFoundError("Attendance session not found")

        schedule = self._schedules.get_by_id(session.schedule_id)
        if not schedule or int(schedule.teacher_id) != int(teacher_id):
            raise AuthorizationError("Not authorized")

        return self._marks.list_roster(session.session_id)

    @staticmethod
    def _reject(student_id, session_id, reason: str) -> None:
        logger.info("mark rejected: student=%s session=%s reason=%s", student_id, session_id, reason)
